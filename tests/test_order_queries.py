from __future__ import annotations

import pytest

from storefront.core import security
from storefront.enums import UserRole
from tests.conftest import auth_headers
from tests.test_order_placement import _place


@pytest.fixture
def placed(client, make_user, make_product):
    """顾客下两单，另一位顾客下一单"""
    customer = make_user()
    other = make_user()
    product = make_product(price="25.00")
    items = [{"product_id": product.id, "quantity": 1}]
    first = _place(client, customer, items).json()["data"]["order"]
    second = _place(client, customer, items).json()["data"]["order"]
    foreign = _place(client, other, items).json()["data"]["order"]
    return customer, other, first, second, foreign


def test_list_orders_newest_first_and_paginated(client, placed):
    customer, _, first, second, _ = placed
    headers = auth_headers(customer)

    r = client.get("/api/v1/orders?page=1&page_size=20", headers=headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["count"] == 2
    assert [o["id"] for o in data["data"]] == [second["id"], first["id"]]
    assert data["data"][0]["items"][0]["product"]["price"] == "25.00"
    assert data["data"][0]["user"] is None

    r = client.get("/api/v1/orders?page=2&page_size=1", headers=headers)
    data = r.json()["data"]
    assert data["count"] == 2
    assert [o["id"] for o in data["data"]] == [first["id"]]


def test_get_own_order(client, placed):
    customer, _, first, _, _ = placed
    r = client.get(f"/api/v1/orders/{first['id']}", headers=auth_headers(customer))
    assert r.status_code == 200
    assert r.json()["data"]["order_no"] == first["order_no"]


def test_cannot_see_other_customers_order(client, placed):
    customer, _, _, _, foreign = placed
    r = client.get(f"/api/v1/orders/{foreign['id']}", headers=auth_headers(customer))
    assert r.status_code == 404
    assert r.json() == {"code": 404201, "message": "Order not found", "data": None}


@pytest.mark.parametrize("status", ["confirmed", "shipped", "delivered", "cancelled"])
def test_customer_status_update(client, placed, status):
    customer, _, first, _, _ = placed
    r = client.patch(
        f"/api/v1/orders/{first['id']}/status",
        headers=auth_headers(customer),
        json={"status": status},
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == status


@pytest.mark.parametrize("status", ["packaging", "on_delivery", "lost"])
def test_customer_status_outside_allowed_set(client, placed, status):
    customer, _, first, _, _ = placed
    r = client.patch(
        f"/api/v1/orders/{first['id']}/status",
        headers=auth_headers(customer),
        json={"status": status},
    )
    assert r.status_code == 422
    assert r.json()["code"] == 422000


def test_customer_cannot_update_foreign_order(client, placed):
    customer, _, _, _, foreign = placed
    r = client.patch(
        f"/api/v1/orders/{foreign['id']}/status",
        headers=auth_headers(customer),
        json={"status": "cancelled"},
    )
    assert r.status_code == 404


def test_manual_cart_clearance(client, make_user, make_product):
    customer = make_user()
    product = make_product()
    headers = auth_headers(customer)
    client.post("/api/v1/cart", headers=headers, json={"product_id": product.id, "quantity": 2})
    client.post("/api/v1/cart", headers=headers, json={"product_id": product.id, "size": "L"})

    r = client.get("/api/v1/orders/cart-count", headers=headers)
    assert r.json()["data"]["cart_count"] == 2

    r = client.post("/api/v1/orders/clear-cart", headers=headers)
    assert r.json()["data"]["deleted_count"] == 2
    r = client.get("/api/v1/orders/cart-count", headers=headers)
    assert r.json()["data"]["cart_count"] == 0


def test_admin_lists_all_orders_with_user(client, make_user, placed):
    customer, other, *_ = placed
    admin = make_user(UserRole.admin)

    r = client.get("/api/v1/admin/orders", headers=auth_headers(admin))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["count"] == 3
    owners = {o["user"]["id"] for o in data["data"]}
    assert owners == {customer.id, other.id}
    assert data["data"][0]["user"]["role"] == "customer"


def test_admin_filters_by_status(client, make_user, placed):
    customer, _, first, _, _ = placed
    admin = make_user(UserRole.admin)
    client.patch(
        f"/api/v1/orders/{first['id']}/status",
        headers=auth_headers(customer),
        json={"status": "confirmed"},
    )

    r = client.get("/api/v1/admin/orders?status=confirmed", headers=auth_headers(admin))
    data = r.json()["data"]
    assert data["count"] == 1
    assert data["data"][0]["id"] == first["id"]


@pytest.mark.parametrize("status", ["packaging", "on_delivery", "delivered"])
def test_admin_status_update(client, make_user, placed, status):
    *_, foreign = placed
    admin = make_user(UserRole.admin)
    r = client.patch(
        f"/api/v1/admin/orders/{foreign['id']}/status",
        headers=auth_headers(admin),
        json={"status": status},
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == status
    assert r.json()["data"]["user"]["id"] == foreign["user_id"]


@pytest.mark.parametrize("status", ["cancelled", "shipped"])
def test_admin_cannot_set_customer_only_status(client, make_user, placed, status):
    *_, foreign = placed
    admin = make_user(UserRole.admin)
    r = client.patch(
        f"/api/v1/admin/orders/{foreign['id']}/status",
        headers=auth_headers(admin),
        json={"status": status},
    )
    assert r.status_code == 422


def test_admin_get_missing_order(client, make_user):
    admin = make_user(UserRole.admin)
    r = client.get("/api/v1/admin/orders/987654", headers=auth_headers(admin))
    assert r.status_code == 404
    assert r.json()["code"] == 404201


@pytest.mark.parametrize("role", [UserRole.customer, UserRole.clerk])
def test_admin_routes_require_admin(client, make_user, role):
    user = make_user(role)
    r = client.get("/api/v1/admin/orders", headers=auth_headers(user))
    assert r.status_code == 403
    assert r.json() == {"code": 403001, "message": "Forbidden", "data": None}


def test_invalid_token_is_rejected(client):
    r = client.get("/api/v1/orders", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["code"] == 401000


def test_token_for_missing_user_is_rejected(client):
    token = security.create_access_token(123456789)
    r = client.get("/api/v1/orders", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == "User not found"


def test_inactive_user_is_rejected(client, make_user):
    user = make_user(is_active=False)
    r = client.get("/api/v1/orders", headers=auth_headers(user))
    assert r.status_code == 401
    assert r.json()["message"] == "Inactive user"


def test_health_check(client):
    r = client.get("/api/v1/utils/health-check/")
    assert r.status_code == 200
    assert r.json() is True
