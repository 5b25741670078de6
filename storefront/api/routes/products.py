"""
商品路由模块

只读的商品目录：上架商品列表（分页，可按分类筛选）和商品详情。
"""
from __future__ import annotations

from fastapi import APIRouter, Query

from storefront import crud
from storefront.api.deps import SessionDep
from storefront.api.errors import not_found
from storefront.api.schemas import ApiEnvelope, ProductPublic, ProductsData
from storefront.enums import ProductStatus

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ApiEnvelope)
def list_products(
    session: SessionDep,
    category_id: int | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ApiEnvelope:
    """
    获取上架商品列表（分页）

    请求路径: GET /api/v1/products?category_id=1&page=1&page_size=20
    """
    rows, count = crud.list_products(
        session=session,
        category_id=category_id,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    data = [ProductPublic.model_validate(p, from_attributes=True) for p in rows]
    return ApiEnvelope(data=ProductsData(data=data, count=count))


@router.get("/{product_id}", response_model=ApiEnvelope)
def get_product(session: SessionDep, product_id: int) -> ApiEnvelope:
    """
    获取商品详情（下架商品视为不存在）

    请求路径: GET /api/v1/products/{product_id}
    """
    product = crud.get_product(session=session, product_id=product_id)
    if not product or product.status != ProductStatus.active:
        raise not_found(404101, "Product")
    return ApiEnvelope(data=ProductPublic.model_validate(product, from_attributes=True))
