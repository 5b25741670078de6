from __future__ import annotations

import json
from decimal import Decimal

import pytest

from storefront.models import MalformedColumnError, Product
from storefront.models.types import VersionedList, decode_versioned_list
from storefront.services.order_service import resolve_product_price


def _product(price="100.00", sizes=None, prices=None) -> Product:
    return Product(
        name="Hoodie",
        price=Decimal(price),
        available_sizes=sizes or [],
        prices=prices or [],
    )


def test_base_price_without_size():
    price, size_price = resolve_product_price(_product(), size=None)
    assert price == Decimal("100.00")
    assert size_price is None


def test_matching_size_uses_parallel_price():
    product = _product(sizes=["S", "M", "L"], prices=[90, 110.5, 130])
    price, size_price = resolve_product_price(product, size="M")
    assert price == Decimal("110.50")
    assert size_price == Decimal("110.50")


def test_length_mismatch_ignores_size_table():
    product = _product(sizes=["S", "M", "L"], prices=[90, 110])
    price, size_price = resolve_product_price(product, size="M")
    assert price == Decimal("100.00")
    # 请求了尺码，尺码价格跟随单价
    assert size_price == Decimal("100.00")


@pytest.mark.parametrize("stored", ["abc", "", None, "Infinity", "1e999999"])
def test_unreadable_size_price_keeps_base_price(stored):
    product = _product(sizes=["S", "M"], prices=[stored, 120])
    price, size_price = resolve_product_price(product, size="S")
    assert price == Decimal("100.00")
    assert size_price == Decimal("100.00")


def test_unknown_size_mirrors_unit_price():
    product = _product(sizes=["S"], prices=[95])
    price, size_price = resolve_product_price(product, size="XXL")
    assert price == Decimal("100.00")
    assert size_price == Decimal("100.00")


def test_positive_caller_values_override():
    product = _product(sizes=["S", "M"], prices=[90, 110])
    price, size_price = resolve_product_price(
        product,
        size="S",
        requested_price=Decimal("75"),
        requested_size_price=Decimal("80"),
    )
    assert price == Decimal("75.00")
    assert size_price == Decimal("80.00")


@pytest.mark.parametrize("requested", [Decimal("0"), Decimal("-5")])
def test_non_positive_caller_price_is_ignored(requested):
    price, _ = resolve_product_price(_product(), size=None, requested_price=requested)
    assert price == Decimal("100.00")


def test_non_positive_size_price_falls_back_to_base():
    product = _product(sizes=["S"], prices=[0])
    price, size_price = resolve_product_price(product, size="S")
    assert price == Decimal("100.00")
    assert size_price == Decimal("0.00")


def test_list_column_binds_versioned_payload():
    column = VersionedList()
    stored = column.process_bind_param(["S", Decimal("12.50")], dialect=None)
    assert json.loads(stored) == {"version": 1, "items": ["S", 12.5]}
    assert json.loads(column.process_bind_param(None, dialect=None))["items"] == []


def test_list_column_rejects_non_list_on_write():
    with pytest.raises(MalformedColumnError):
        VersionedList().process_bind_param("S,M,L", dialect=None)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, []),
        ('{"version": 1, "items": ["S", "M"]}', ["S", "M"]),
        ('["S", "M"]', ["S", "M"]),
        (json.dumps(json.dumps(["S", "M"])), ["S", "M"]),
        ('{"version": 1, "items": []}', []),
    ],
)
def test_decode_accepts_known_shapes(raw, expected):
    assert decode_versioned_list(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"version": 2, "items": ["S"]}',
        '{"items": "S"}',
        "42",
        '"S"',
    ],
)
def test_decode_rejects_malformed_payload(raw):
    with pytest.raises(MalformedColumnError) as exc_info:
        decode_versioned_list(raw)
    assert exc_info.value.raw is not None
