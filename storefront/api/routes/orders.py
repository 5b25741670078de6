"""
订单路由模块

处理订单相关的 API 端点，包括：
- 下单（行项目解析、优惠券核销、清空购物车，一个事务完成）
- 查询订单列表（分页）
- 查询单个订单详情
- 修改订单状态
- 购物车数量 / 清空购物车
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Query  # FastAPI 路由和查询参数

from storefront import crud  # 数据库操作
from storefront.api.deps import CurrentUser, SessionDep  # 依赖注入
from storefront.api.errors import not_found  # 自定义异常
from storefront.api.schemas import (
    ApiEnvelope,
    CartClearedData,
    CartCountData,
    CustomerSnapshot,
    OrderCreateRequest,
    OrderData,
    OrderItemData,
    OrderPlacedData,
    OrdersData,
    OrderStatusUpdateRequest,
    ProductSummary,
    ProposalSummary,
    UserSummary,
    VoucherSummary,
)
from storefront.models import Order, OrderItem  # 订单模型
from storefront.services import order_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def _to_item_data(item: OrderItem) -> OrderItemData:
    product = item.product
    proposal = item.custom_proposal
    return OrderItemData(
        id=item.id,
        product_id=item.product_id,
        custom_proposal_id=item.custom_proposal_id,
        name=item.name,
        price=item.price,
        size_price=item.size_price,
        quantity=item.quantity,
        size=item.size,
        image=item.image,
        is_customized=item.is_customized,
        customization_details=item.customization_details,
        product=ProductSummary(
            id=product.id, name=product.name, price=product.price, image=product.image
        )
        if product
        else None,
        custom_proposal=ProposalSummary(
            id=proposal.id,
            name=proposal.name,
            category=proposal.category,
            material=proposal.material,
            customization_request=proposal.customization_request,
            images=proposal.images,
            total_price=proposal.total_price,
        )
        if proposal
        else None,
    )


def to_order_data(order: Order, *, include_user: bool = False) -> OrderData:
    """
    将订单模型转换为响应数据模型

    Args:
        order: 订单数据库模型（需要已加载 items/voucher，管理端还需要 user）
        include_user: 是否附带下单用户信息（管理端）

    Returns:
        OrderData: 订单响应数据模型
    """
    voucher = order.voucher
    user = order.user if include_user else None
    return OrderData(
        id=order.id,
        order_no=order.order_no,
        user_id=order.user_id,
        subtotal=order.subtotal,
        shipping_fee=order.shipping_fee,
        discount_amount=order.discount_amount,
        total_amount=order.total_amount,
        voucher_id=order.voucher_id,
        voucher_code=order.voucher_code,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        status=order.status,
        customer=CustomerSnapshot(
            first_name=order.customer_first_name,
            last_name=order.customer_last_name,
            email=order.customer_email,
            phone=order.customer_phone,
            address=order.customer_address,
        ),
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[_to_item_data(item) for item in order.items],
        voucher=VoucherSummary(id=voucher.id, name=voucher.name, percent=voucher.percent)
        if voucher
        else None,
        user=UserSummary(
            id=user.id, email=user.email, full_name=user.full_name, role=user.role
        )
        if user
        else None,
    )


@router.post("", response_model=ApiEnvelope)
def place_order(
    session: SessionDep, current_user: CurrentUser, body: OrderCreateRequest
) -> ApiEnvelope:
    """
    下单

    请求路径: POST /api/v1/orders

    下单成功后用户的全部购物车条目都会被清空。
    找不到的商品、不属于当前用户或已下单的定制方案会被跳过，
    见响应中的 skipped_items；优惠券不可用时见 voucher_rejected_reason。

    Raises:
        AppError: 500301 下单事务失败（已整体回滚）
    """
    result = order_service.place_order(session=session, user=current_user, request=body)
    return ApiEnvelope(
        data=OrderPlacedData(
            order=to_order_data(result.order),
            cart_cleared=result.cart_cleared,
            initial_cart_count=result.initial_cart_count,
            skipped_items=result.skipped_items,
            voucher_rejected_reason=result.voucher_rejected_reason,
        )
    )


@router.get("", response_model=ApiEnvelope)
def list_orders(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(default=1, ge=1),  # 页码，从 1 开始
    page_size: int = Query(default=20, ge=1, le=100),  # 每页数量，1-100
) -> ApiEnvelope:
    """
    获取订单列表（分页）

    查询当前用户的所有订单，按创建时间倒序排列。

    请求路径: GET /api/v1/orders?page=1&page_size=20
    """
    rows, count = crud.list_orders(
        session=session,
        user_id=current_user.id,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    data = [to_order_data(o) for o in rows]
    return ApiEnvelope(data=OrdersData(data=data, count=count))


@router.get("/cart-count", response_model=ApiEnvelope)
def cart_count(session: SessionDep, current_user: CurrentUser) -> ApiEnvelope:
    """请求路径: GET /api/v1/orders/cart-count"""
    count = crud.count_cart_items(session=session, user_id=current_user.id)
    return ApiEnvelope(data=CartCountData(cart_count=count))


@router.post("/clear-cart", response_model=ApiEnvelope)
def clear_cart(session: SessionDep, current_user: CurrentUser) -> ApiEnvelope:
    """
    手动清空购物车

    请求路径: POST /api/v1/orders/clear-cart
    """
    deleted = crud.clear_cart(session=session, user_id=current_user.id)
    session.commit()
    logger.info("Manual cart clearance for user %s: %s items deleted", current_user.id, deleted)
    return ApiEnvelope(data=CartClearedData(deleted_count=deleted))


@router.get("/{order_id}", response_model=ApiEnvelope)
def get_order(session: SessionDep, current_user: CurrentUser, order_id: int) -> ApiEnvelope:
    """
    获取订单详情

    只能查询当前用户自己的订单。

    请求路径: GET /api/v1/orders/{order_id}

    Raises:
        AppError: 当订单不存在或不属于当前用户时抛出 404201 错误
    """
    order = crud.get_order(session=session, order_id=order_id, user_id=current_user.id)
    if not order:
        raise not_found(404201, "Order")
    return ApiEnvelope(data=to_order_data(order))


@router.patch("/{order_id}/status", response_model=ApiEnvelope)
def update_order_status(
    session: SessionDep,
    current_user: CurrentUser,
    order_id: int,
    body: OrderStatusUpdateRequest,
) -> ApiEnvelope:
    """
    修改订单状态

    状态之间没有流转约束，只要在顾客端允许的集合内即可。

    请求路径: PATCH /api/v1/orders/{order_id}/status
    """
    order = crud.get_order(session=session, order_id=order_id, user_id=current_user.id)
    if not order:
        raise not_found(404201, "Order")
    order = crud.update_order_status(session=session, order=order, status=body.status)
    return ApiEnvelope(data=to_order_data(order))
