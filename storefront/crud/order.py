"""订单 CRUD 操作（查询与状态更新）"""
from collections.abc import Sequence

from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, func, select

from storefront.enums import OrderStatus
from storefront.models import Order, OrderItem, utc_now


def _with_details(stmt, *, include_user: bool = False):
    # 行项目（含商品/方案当前信息）和优惠券一次性预加载
    stmt = stmt.options(
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.items).selectinload(OrderItem.custom_proposal),
        selectinload(Order.voucher),
    )
    if include_user:
        stmt = stmt.options(selectinload(Order.user))
    return stmt


def get_order(
    *,
    session: Session,
    order_id: int,
    user_id: int | None = None,
    include_user: bool = False,
) -> Order | None:
    """
    按 ID 查询订单

    user_id 不为空时只返回属于该用户的订单（顾客端），
    为空时不限制归属（管理端）。
    """
    stmt = select(Order).where(Order.id == order_id)
    if user_id is not None:
        stmt = stmt.where(Order.user_id == user_id)
    stmt = _with_details(stmt, include_user=include_user)
    return session.exec(stmt).first()


def list_orders(
    *,
    session: Session,
    user_id: int | None = None,
    status: OrderStatus | None = None,
    offset: int = 0,
    limit: int = 20,
    include_user: bool = False,
) -> tuple[Sequence[Order], int]:
    """分页查询订单（最新在前），返回 (当前页, 总数)"""
    conditions = []
    if user_id is not None:
        conditions.append(Order.user_id == user_id)
    if status is not None:
        conditions.append(Order.status == status)

    count = session.exec(
        select(func.count()).select_from(Order).where(*conditions)
    ).one()
    stmt = (
        select(Order)
        .where(*conditions)
        .order_by(col(Order.created_at).desc(), col(Order.id).desc())
        .offset(offset)
        .limit(limit)
    )
    rows = session.exec(_with_details(stmt, include_user=include_user)).all()
    return rows, count


def update_status(*, session: Session, order: Order, status: OrderStatus) -> Order:
    """直接写入新状态，不校验状态流转（允许的集合由调用方的请求模型限制）"""
    order.status = status
    order.updated_at = utc_now()
    session.add(order)
    session.commit()
    session.refresh(order)
    return order
