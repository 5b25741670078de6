from __future__ import annotations

import json
from datetime import datetime, timedelta

from sqlmodel import select

from storefront.enums import UserRole
from storefront.models import UserVoucher, Voucher, ensure_utc, utc_now
from storefront.worker import tasks
from tests.conftest import auth_headers


def _create_template(client, admin, **overrides) -> dict:
    body = {
        "name": "Welcome 15",
        "description": "15% off your next order",
        "percent": 15,
        "expiration_type": "hours",
        "expiration_duration": 48,
    }
    body.update(overrides)
    r = client.post("/api/v1/admin/vouchers", headers=auth_headers(admin), json=body)
    assert r.status_code == 200
    return r.json()["data"]


def test_admin_creates_and_sends_voucher(client, make_user, fake_redis):
    admin = make_user(UserRole.admin)
    customer = make_user()
    template = _create_template(client, admin)
    assert template["status"] == "enabled"

    r = client.post(
        f"/api/v1/admin/vouchers/{template['id']}/send",
        headers=auth_headers(admin),
        json={"customer_id": customer.id},
    )
    assert r.status_code == 200
    grant = r.json()["data"]
    assert grant["voucher_code"].startswith("VC-")
    assert grant["percent"] == 15
    assert grant["is_expired"] is False

    # 过期时间在发放时写入：sent_at + 48 小时
    sent_at = datetime.fromisoformat(grant["sent_at"].replace("Z", "+00:00"))
    expires_at = datetime.fromisoformat(grant["expires_at"].replace("Z", "+00:00"))
    assert expires_at - sent_at == timedelta(hours=48)

    channel, message = fake_redis.published[-1]
    assert channel == f"notifications.{customer.id}"
    assert json.loads(message)["event"] == "voucher.received"


def test_each_grant_has_its_own_code(client, make_user):
    admin = make_user(UserRole.admin)
    customer = make_user()
    template = _create_template(client, admin)
    codes = {
        client.post(
            f"/api/v1/admin/vouchers/{template['id']}/send",
            headers=auth_headers(admin),
            json={"customer_id": customer.id},
        ).json()["data"]["voucher_code"]
        for _ in range(3)
    }
    assert len(codes) == 3


def test_send_to_missing_customer(client, make_user):
    admin = make_user(UserRole.admin)
    template = _create_template(client, admin)
    r = client.post(
        f"/api/v1/admin/vouchers/{template['id']}/send",
        headers=auth_headers(admin),
        json={"customer_id": 424242},
    )
    assert r.status_code == 404
    assert r.json()["code"] == 404001


def test_send_missing_template(client, make_user):
    admin = make_user(UserRole.admin)
    customer = make_user()
    r = client.post(
        "/api/v1/admin/vouchers/999/send",
        headers=auth_headers(admin),
        json={"customer_id": customer.id},
    )
    assert r.json()["code"] == 404401


def test_template_percent_must_be_in_range(client, make_user):
    admin = make_user(UserRole.admin)
    for percent in (0, 101):
        r = client.post(
            "/api/v1/admin/vouchers",
            headers=auth_headers(admin),
            json={
                "name": "Bad",
                "percent": percent,
                "expiration_type": "days",
                "expiration_duration": 1,
            },
        )
        assert r.status_code == 422


def test_customer_cannot_manage_vouchers(client, make_user):
    customer = make_user()
    r = client.post(
        "/api/v1/admin/vouchers",
        headers=auth_headers(customer),
        json={"name": "Free", "percent": 100, "expiration_type": "days", "expiration_duration": 1},
    )
    assert r.status_code == 403


def test_my_vouchers_only_lists_usable_grants(client, make_user, make_grant):
    customer = make_user()
    usable = make_grant(customer, percent=10)
    make_grant(customer, percent=20, used=True)
    make_grant(customer, percent=30, expires_in_days=-1)
    make_grant(customer, percent=40, enabled=False)
    make_grant(make_user(), percent=50)

    r = client.get("/api/v1/vouchers/mine", headers=auth_headers(customer))
    data = r.json()["data"]
    assert data["count"] == 1
    assert data["data"][0]["id"] == usable.id
    assert data["data"][0]["percent"] == 10


def test_validate_usable_voucher(client, make_user, make_grant):
    customer = make_user()
    grant = make_grant(customer, percent=10)
    r = client.post(
        "/api/v1/vouchers/validate",
        headers=auth_headers(customer),
        json={"user_voucher_id": grant.id},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["valid"] is True
    assert data["percent"] == 10
    assert data["voucher_code"] == grant.voucher_code


def test_validate_reports_specific_reasons(client, make_user, make_grant):
    customer = make_user()
    headers = auth_headers(customer)
    cases = [
        (make_grant(customer, used=True), 400, 400401),
        (make_grant(customer, expires_in_days=-1), 400, 400402),
        (make_grant(customer, enabled=False), 400, 400403),
        (make_grant(make_user()), 404, 404402),
    ]
    for grant, status_code, code in cases:
        r = client.post("/api/v1/vouchers/validate", headers=headers, json={"user_voucher_id": grant.id})
        assert r.status_code == status_code
        assert r.json()["code"] == code


def test_toggle_blocks_future_redemption(client, db, make_user, make_grant):
    admin = make_user(UserRole.admin)
    customer = make_user()
    grant = make_grant(customer)
    headers = auth_headers(customer)

    r = client.post(f"/api/v1/admin/vouchers/{grant.voucher_id}/toggle", headers=auth_headers(admin))
    assert r.json()["data"]["status"] == "disabled"
    r = client.post("/api/v1/vouchers/validate", headers=headers, json={"user_voucher_id": grant.id})
    assert r.json()["code"] == 400403

    r = client.post(f"/api/v1/admin/vouchers/{grant.voucher_id}/toggle", headers=auth_headers(admin))
    assert r.json()["data"]["status"] == "enabled"
    r = client.post("/api/v1/vouchers/validate", headers=headers, json={"user_voucher_id": grant.id})
    assert r.status_code == 200


def test_backfill_fills_missing_expiry(engine, db, make_user, make_grant):
    customer = make_user()
    legacy = make_grant(customer, expires_in_days=None)
    current = make_grant(customer)
    original_expiry = ensure_utc(current.expires_at)

    assert tasks.backfill_voucher_expiry(engine) == 1
    assert tasks.backfill_voucher_expiry(engine) == 0

    db.expire_all()
    filled = db.get(UserVoucher, legacy.id)
    voucher = db.get(Voucher, filled.voucher_id)
    assert ensure_utc(filled.expires_at) == voucher.expiry_from(ensure_utc(filled.sent_at))
    assert ensure_utc(db.get(UserVoucher, current.id).expires_at) == original_expiry


def test_backfill_skips_when_lock_is_held(engine, db, make_user, make_grant, fake_redis):
    customer = make_user()
    make_grant(customer, expires_in_days=None)
    fake_redis.store[tasks.BACKFILL_LOCK_KEY] = "another-worker"

    assert tasks.backfill_voucher_expiry(engine) == 0
    db.expire_all()
    pending = db.exec(select(UserVoucher).where(UserVoucher.expires_at.is_(None))).all()
    assert len(pending) == 1
    assert fake_redis.store[tasks.BACKFILL_LOCK_KEY] == "another-worker"


def test_expiry_window_is_inclusive(make_user, make_grant):
    customer = make_user()
    grant = make_grant(customer)
    expires_at = ensure_utc(grant.expires_at)
    assert grant.is_expired(now=expires_at) is False
    assert grant.is_expired(now=expires_at + timedelta(seconds=1)) is True
    assert grant.is_expired(now=utc_now()) is False
