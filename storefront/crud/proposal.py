"""定制方案 CRUD 操作"""
from collections.abc import Sequence

from sqlmodel import Session, select

from storefront.api.schemas import ProposalCreateRequest
from storefront.models import CustomProposal


def create_proposal(
    *, session: Session, author_id: int, body: ProposalCreateRequest
) -> CustomProposal:
    """店员为某位顾客创建定制方案"""
    proposal = CustomProposal(
        user_id=author_id,
        customer_id=body.customer_id,
        name=body.name,
        category=body.category,
        product_type=body.product_type,
        customization_request=body.customization_request,
        designer_message=body.designer_message,
        material=body.material,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        quantity=body.quantity,
        total_price=body.total_price,
        features=list(body.features),
        images=list(body.images),
        size_options=list(body.size_options),
    )
    session.add(proposal)
    session.commit()
    session.refresh(proposal)
    return proposal


def get_proposal(
    *, session: Session, proposal_id: int, for_update: bool = False
) -> CustomProposal | None:
    """按 ID 查询定制方案，for_update=True 时加行锁（下单时使用）"""
    stmt = select(CustomProposal).where(CustomProposal.id == proposal_id)
    if for_update:
        stmt = stmt.with_for_update()
    return session.exec(stmt).first()


def list_for_customer(*, session: Session, customer_id: int) -> Sequence[CustomProposal]:
    """查询发给某位顾客的全部方案（最新在前）"""
    stmt = (
        select(CustomProposal)
        .where(CustomProposal.customer_id == customer_id)
        .order_by(CustomProposal.created_at.desc(), CustomProposal.id.desc())
    )
    return session.exec(stmt).all()
