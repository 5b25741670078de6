"""
定制方案路由模块

- 店员/管理员为顾客出具方案，并推送 proposal.sent 通知
- 顾客查看发给自己的方案
"""
from __future__ import annotations

import logging

from fastapi import APIRouter

from storefront import crud
from storefront.api.deps import CurrentUser, SessionDep, StaffUser
from storefront.api.errors import not_found
from storefront.api.schemas import (
    ApiEnvelope,
    ProposalCreateRequest,
    ProposalPublic,
    ProposalsData,
)
from storefront.enums import UserRole
from storefront.services import notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proposals", tags=["proposals"])


@router.post("", response_model=ApiEnvelope)
def create_proposal(
    session: SessionDep, current_user: StaffUser, body: ProposalCreateRequest
) -> ApiEnvelope:
    """
    出具定制方案

    请求路径: POST /api/v1/proposals

    Raises:
        AppError: 当顾客不存在时抛出 404 错误
    """
    customer = crud.get_user_by_id(session=session, user_id=body.customer_id)
    if not customer:
        raise not_found(404001, "Customer")

    proposal = crud.create_proposal(session=session, author_id=current_user.id, body=body)
    logger.info(
        "Proposal %s sent by user %s to customer %s", proposal.id, current_user.id, customer.id
    )
    notification_service.notify_proposal_sent(proposal, body.message)
    return ApiEnvelope(data=ProposalPublic.model_validate(proposal, from_attributes=True))


@router.get("/mine", response_model=ApiEnvelope)
def my_proposals(session: SessionDep, current_user: CurrentUser) -> ApiEnvelope:
    """请求路径: GET /api/v1/proposals/mine"""
    rows = crud.list_proposals_for_customer(session=session, customer_id=current_user.id)
    data = [ProposalPublic.model_validate(p, from_attributes=True) for p in rows]
    return ApiEnvelope(data=ProposalsData(data=data, count=len(data)))


@router.get("/{proposal_id}", response_model=ApiEnvelope)
def get_proposal(session: SessionDep, current_user: CurrentUser, proposal_id: int) -> ApiEnvelope:
    """
    获取方案详情

    只有出具方案的店员、接收方案的顾客和管理员可以查看，其他人视为不存在。

    请求路径: GET /api/v1/proposals/{proposal_id}
    """
    proposal = crud.get_proposal(session=session, proposal_id=proposal_id)
    if not proposal or (
        current_user.role != UserRole.admin
        and current_user.id not in (proposal.user_id, proposal.customer_id)
    ):
        raise not_found(404301, "Proposal")
    return ApiEnvelope(data=ProposalPublic.model_validate(proposal, from_attributes=True))
