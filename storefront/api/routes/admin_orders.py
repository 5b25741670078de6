"""
管理端订单路由模块

管理员查看全部订单、修改订单状态。响应中附带下单用户信息。
管理端允许的状态集合与顾客端不同（有 packaging/on_delivery，没有 cancelled）。
"""
from __future__ import annotations

from fastapi import APIRouter, Query

from storefront import crud
from storefront.api.deps import AdminUser, SessionDep
from storefront.api.errors import not_found
from storefront.api.routes.orders import to_order_data
from storefront.api.schemas import AdminOrderStatusUpdateRequest, ApiEnvelope, OrdersData
from storefront.enums import OrderStatus

router = APIRouter(prefix="/admin/orders", tags=["admin-orders"])


@router.get("", response_model=ApiEnvelope)
def list_all_orders(
    session: SessionDep,
    _: AdminUser,
    status: OrderStatus | None = Query(default=None),  # 按状态筛选
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ApiEnvelope:
    """
    获取全部订单（分页，最新在前）

    请求路径: GET /api/v1/admin/orders?status=pending&page=1&page_size=20
    """
    rows, count = crud.list_orders(
        session=session,
        status=status,
        offset=(page - 1) * page_size,
        limit=page_size,
        include_user=True,
    )
    data = [to_order_data(o, include_user=True) for o in rows]
    return ApiEnvelope(data=OrdersData(data=data, count=count))


@router.get("/{order_id}", response_model=ApiEnvelope)
def get_any_order(session: SessionDep, _: AdminUser, order_id: int) -> ApiEnvelope:
    """请求路径: GET /api/v1/admin/orders/{order_id}"""
    order = crud.get_order(session=session, order_id=order_id, include_user=True)
    if not order:
        raise not_found(404201, "Order")
    return ApiEnvelope(data=to_order_data(order, include_user=True))


@router.patch("/{order_id}/status", response_model=ApiEnvelope)
def update_any_order_status(
    session: SessionDep,
    _: AdminUser,
    order_id: int,
    body: AdminOrderStatusUpdateRequest,
) -> ApiEnvelope:
    """
    修改任意订单的状态

    请求路径: PATCH /api/v1/admin/orders/{order_id}/status
    """
    order = crud.get_order(session=session, order_id=order_id, include_user=True)
    if not order:
        raise not_found(404201, "Order")
    order = crud.update_order_status(session=session, order=order, status=body.status)
    return ApiEnvelope(data=to_order_data(order, include_user=True))
