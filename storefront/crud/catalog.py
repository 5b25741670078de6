"""商品目录 CRUD 操作（只读）"""
from collections.abc import Sequence

from sqlmodel import Session, func, select

from storefront.enums import ProductStatus
from storefront.models import Product


def get_product(*, session: Session, product_id: int) -> Product | None:
    """按 ID 查询商品，不区分上下架（历史订单和下单都需要）"""
    return session.get(Product, product_id)


def list_products(
    *,
    session: Session,
    category_id: int | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[Sequence[Product], int]:
    """分页查询上架商品，返回 (当前页, 总数)"""
    conditions = [Product.status == ProductStatus.active]
    if category_id is not None:
        conditions.append(Product.category_id == category_id)

    count = session.exec(
        select(func.count()).select_from(Product).where(*conditions)
    ).one()
    rows = session.exec(
        select(Product)
        .where(*conditions)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()
    return rows, count
