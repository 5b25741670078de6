"""
优惠券路由模块

顾客端（/vouchers）：
- 查询自己可用的优惠券
- 下单前校验一张优惠券

管理端（/admin/vouchers）：
- 创建优惠券模板
- 向顾客发券（发放时计算过期时间，并推送 voucher.received 通知）
- 启用/停用模板
"""
from __future__ import annotations

import logging

from fastapi import APIRouter

from storefront import crud
from storefront.api.deps import AdminUser, CurrentUser, SessionDep
from storefront.api.errors import AppError, not_found
from storefront.api.schemas import (
    ApiEnvelope,
    UserVoucherPublic,
    UserVouchersData,
    VoucherCreateRequest,
    VoucherPublic,
    VoucherSendRequest,
    VoucherValidateData,
    VoucherValidateRequest,
)
from storefront.models import UserVoucher, Voucher, ensure_utc
from storefront.services import notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vouchers", tags=["vouchers"])
admin_router = APIRouter(prefix="/admin/vouchers", tags=["admin-vouchers"])


def _to_user_voucher(grant: UserVoucher, voucher: Voucher) -> UserVoucherPublic:
    return UserVoucherPublic(
        id=grant.id,
        voucher_id=voucher.id,
        voucher_code=grant.voucher_code,
        name=voucher.name,
        description=voucher.description,
        percent=voucher.percent,
        image=voucher.image,
        status=voucher.status,
        sent_at=ensure_utc(grant.sent_at),
        expires_at=ensure_utc(grant.expires_at),
        is_expired=grant.is_expired(),
    )


@router.get("/mine", response_model=ApiEnvelope)
def my_vouchers(session: SessionDep, current_user: CurrentUser) -> ApiEnvelope:
    """
    获取当前用户可用的优惠券

    只返回未使用、未过期且模板已启用的券。

    请求路径: GET /api/v1/vouchers/mine
    """
    rows = crud.list_unused_voucher_grants(session=session, user_id=current_user.id)
    data = [
        _to_user_voucher(grant, voucher)
        for grant, voucher in rows
        if voucher.is_active and not grant.is_expired()
    ]
    return ApiEnvelope(data=UserVouchersData(data=data, count=len(data)))


@router.post("/validate", response_model=ApiEnvelope)
def validate_voucher(
    session: SessionDep, current_user: CurrentUser, body: VoucherValidateRequest
) -> ApiEnvelope:
    """
    校验优惠券是否可用（不核销）

    请求路径: POST /api/v1/vouchers/validate

    Raises:
        AppError: 404402 券不存在；400401 已使用；400402 已过期；400403 模板已停用
    """
    grant = crud.get_user_voucher(
        session=session, user_voucher_id=body.user_voucher_id, user_id=current_user.id
    )
    if not grant:
        raise not_found(404402, "Voucher")
    if grant.is_used():
        raise AppError(code=400401, message="Voucher already used")
    if grant.is_expired():
        raise AppError(code=400402, message="Voucher expired")
    voucher = crud.get_voucher(session=session, voucher_id=grant.voucher_id)
    if not voucher:
        raise not_found(404401, "Voucher")
    if not voucher.is_active:
        raise AppError(code=400403, message="Voucher is not active")
    return ApiEnvelope(
        data=VoucherValidateData(
            user_voucher_id=grant.id,
            voucher_id=voucher.id,
            name=voucher.name,
            percent=voucher.percent,
            voucher_code=grant.voucher_code,
        )
    )


@admin_router.post("", response_model=ApiEnvelope)
def create_voucher(session: SessionDep, _: AdminUser, body: VoucherCreateRequest) -> ApiEnvelope:
    """请求路径: POST /api/v1/admin/vouchers"""
    voucher = crud.create_voucher(session=session, body=body)
    return ApiEnvelope(data=VoucherPublic.model_validate(voucher, from_attributes=True))


@admin_router.post("/{voucher_id}/send", response_model=ApiEnvelope)
def send_voucher(
    session: SessionDep, _: AdminUser, voucher_id: int, body: VoucherSendRequest
) -> ApiEnvelope:
    """
    向顾客发放一张优惠券

    请求路径: POST /api/v1/admin/vouchers/{voucher_id}/send
    """
    voucher = crud.get_voucher(session=session, voucher_id=voucher_id)
    if not voucher:
        raise not_found(404401, "Voucher")
    customer = crud.get_user_by_id(session=session, user_id=body.customer_id)
    if not customer:
        raise not_found(404001, "Customer")

    grant = crud.issue_voucher_grant(session=session, voucher=voucher, user_id=customer.id)
    logger.info("Voucher %s sent to user %s as %s", voucher.id, customer.id, grant.voucher_code)
    notification_service.notify_voucher_received(grant, voucher)
    return ApiEnvelope(data=_to_user_voucher(grant, voucher))


@admin_router.post("/{voucher_id}/toggle", response_model=ApiEnvelope)
def toggle_voucher(session: SessionDep, _: AdminUser, voucher_id: int) -> ApiEnvelope:
    """
    启用/停用优惠券模板

    请求路径: POST /api/v1/admin/vouchers/{voucher_id}/toggle
    """
    voucher = crud.get_voucher(session=session, voucher_id=voucher_id)
    if not voucher:
        raise not_found(404401, "Voucher")
    voucher = crud.toggle_voucher_status(session=session, voucher=voucher)
    return ApiEnvelope(data=VoucherPublic.model_validate(voucher, from_attributes=True))
