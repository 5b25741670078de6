"""
购物车路由模块

查询、加入、删除购物车条目。条目引用一个商品或一个发给当前用户的定制方案。
"""
from __future__ import annotations

from fastapi import APIRouter

from storefront import crud
from storefront.api.deps import CurrentUser, SessionDep
from storefront.api.errors import not_found
from storefront.api.schemas import ApiEnvelope, CartData, CartItemCreateRequest, CartItemPublic
from storefront.enums import ProductStatus

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=ApiEnvelope)
def list_cart(session: SessionDep, current_user: CurrentUser) -> ApiEnvelope:
    """请求路径: GET /api/v1/cart"""
    rows = crud.list_cart_items(session=session, user_id=current_user.id)
    data = [CartItemPublic.model_validate(i, from_attributes=True) for i in rows]
    return ApiEnvelope(data=CartData(data=data, count=len(data)))


@router.post("", response_model=ApiEnvelope)
def add_to_cart(
    session: SessionDep, current_user: CurrentUser, body: CartItemCreateRequest
) -> ApiEnvelope:
    """
    加入购物车

    同一商品（或方案）、同一尺码的条目会合并数量。

    请求路径: POST /api/v1/cart

    Raises:
        AppError: 404101 商品不存在或已下架；404301 方案不存在或不是发给当前用户的
    """
    if body.product_id is not None:
        product = crud.get_product(session=session, product_id=body.product_id)
        if not product or product.status != ProductStatus.active:
            raise not_found(404101, "Product")
    else:
        proposal = crud.get_proposal(session=session, proposal_id=body.custom_proposal_id)
        if not proposal or proposal.customer_id != current_user.id:
            raise not_found(404301, "Proposal")

    item = crud.add_cart_item(
        session=session,
        user_id=current_user.id,
        product_id=body.product_id,
        custom_proposal_id=body.custom_proposal_id,
        quantity=body.quantity,
        size=body.size,
    )
    return ApiEnvelope(data=CartItemPublic.model_validate(item, from_attributes=True))


@router.delete("/{item_id}", response_model=ApiEnvelope)
def remove_from_cart(session: SessionDep, current_user: CurrentUser, item_id: int) -> ApiEnvelope:
    """
    删除一个购物车条目

    请求路径: DELETE /api/v1/cart/{item_id}
    """
    item = crud.get_cart_item(session=session, user_id=current_user.id, item_id=item_id)
    if not item:
        raise not_found(404501, "Cart item")
    crud.delete_cart_item(session=session, item=item)
    return ApiEnvelope(data={"id": item_id})
