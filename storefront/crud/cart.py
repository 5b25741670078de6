"""购物车 CRUD 操作"""
from collections.abc import Sequence

from sqlmodel import Session, delete, func, select

from storefront.models import CartItem, utc_now


def list_items(*, session: Session, user_id: int) -> Sequence[CartItem]:
    stmt = (
        select(CartItem)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.desc(), CartItem.id.desc())
    )
    return session.exec(stmt).all()


def add_item(
    *,
    session: Session,
    user_id: int,
    product_id: int | None,
    custom_proposal_id: int | None,
    quantity: int,
    size: str | None,
) -> CartItem:
    """加入购物车；同一商品/方案、同一尺码的条目合并数量"""
    existing = session.exec(
        select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id,
            CartItem.custom_proposal_id == custom_proposal_id,
            CartItem.size == size,
        )
    ).first()
    if existing:
        existing.quantity += quantity
        existing.updated_at = utc_now()
        item = existing
    else:
        item = CartItem(
            user_id=user_id,
            product_id=product_id,
            custom_proposal_id=custom_proposal_id,
            quantity=quantity,
            size=size,
        )
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def get_item(*, session: Session, user_id: int, item_id: int) -> CartItem | None:
    return session.exec(
        select(CartItem).where(CartItem.id == item_id, CartItem.user_id == user_id)
    ).first()


def count_items(*, session: Session, user_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(CartItem).where(CartItem.user_id == user_id)
    ).one()


def clear(*, session: Session, user_id: int) -> int:
    """删除用户的全部购物车条目（不提交事务），返回删除数量"""
    result = session.exec(delete(CartItem).where(CartItem.user_id == user_id))
    return result.rowcount


def delete_item(*, session: Session, item: CartItem) -> None:
    session.delete(item)
    session.commit()
