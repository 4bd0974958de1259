"""
Commerce Django adapter tests: auth, envelopes and error mapping over
the /v1/ JSON endpoints.
"""

from __future__ import annotations

import json

import pytest

from adapters.django_api.wiring import (
    DEV_ADMIN_API_KEY,
    DEV_CLERK_API_KEY,
    build_dependencies,
    reset_dependencies,
)


@pytest.fixture(autouse=True)
def fresh_dependencies():
    reset_dependencies()
    yield
    reset_dependencies()


def _post(client, path: str, body: dict, api_key: str = DEV_ADMIN_API_KEY):
    return client.post(
        f"/v1/{path}",
        data=json.dumps(body),
        content_type="application/json",
        HTTP_X_API_KEY=api_key,
    )


def _get(client, path: str, params: dict | None = None, api_key: str = DEV_ADMIN_API_KEY):
    return client.get(f"/v1/{path}", params or {}, HTTP_X_API_KEY=api_key)


def _stocked(client, quantity: int = 10) -> None:
    _post(client, "inventory/warehouses/register", {"warehouse_id": "W1", "name": "Main"})
    _post(client, "inventory/receive", {"sku": "ABC", "warehouse_id": "W1", "quantity": quantity})


# ══════════════════════════════════════════════════════════════
# AUTH
# ══════════════════════════════════════════════════════════════

def test_missing_api_key_is_401(client) -> None:
    response = client.get("/v1/inventory/warehouses")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_MISSING"


def test_unknown_api_key_is_401(client) -> None:
    response = _get(client, "inventory/warehouses", api_key="wrong")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_INVALID"


def test_clerk_cannot_write_price_books(client) -> None:
    response = _post(
        client,
        "pricing/price-books/upsert",
        {"price_book_id": "PB1", "name": "Base", "currency": "USD", "prices": {"P1": 100}},
        api_key=DEV_CLERK_API_KEY,
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "PERMISSION_DENIED"


def test_wrong_method_is_405(client) -> None:
    response = _get(client, "inventory/receive")
    assert response.status_code == 405


# ══════════════════════════════════════════════════════════════
# INVENTORY
# ══════════════════════════════════════════════════════════════

def test_reserve_and_fulfill_flow(client) -> None:
    _stocked(client)

    reserved = _post(client, "inventory/reserve", {"sku": "ABC", "warehouse_id": "W1", "quantity": 7})
    assert reserved.status_code == 200
    handle_id = reserved.json()["data"]["handle_id"]

    rejected = _post(client, "inventory/reserve", {"sku": "ABC", "warehouse_id": "W1", "quantity": 5})
    assert rejected.status_code == 409
    assert rejected.json()["error"]["code"] == "INSUFFICIENT_STOCK"
    assert rejected.json()["error"]["details"]["available"] == 3

    fulfilled = _post(client, "inventory/fulfill", {"handle_id": handle_id})
    assert fulfilled.json() == {
        "ok": True,
        "data": {
            "sku": "ABC",
            "warehouse_id": "W1",
            "quantity": 3,
            "reserved": 0,
            "available": 3,
            "is_low_stock": False,
            "reorder_point": None,
        },
    }

    again = _post(client, "inventory/release", {"handle_id": handle_id})
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_HANDLE"


def test_status_and_low_stock(client) -> None:
    _stocked(client, quantity=5)
    _post(client, "inventory/reorder-point", {"sku": "ABC", "warehouse_id": "W1", "reorder_point": 5})

    status = _get(client, "inventory/status", {"sku": "ABC", "warehouse_id": "W1"})
    assert status.json()["data"]["is_low_stock"] is True

    low = _get(client, "inventory/low-stock").json()["data"]
    assert [row["item"]["sku"] for row in low] == ["ABC"]
    assert low[0]["suggested_quantity"] == 1


def test_items_listing(client) -> None:
    _stocked(client)
    items = _get(client, "inventory/items", {"warehouse_id": "W1"}).json()["data"]
    assert [item["sku"] for item in items] == ["ABC"]


def test_receive_into_unknown_warehouse_is_400(client) -> None:
    response = _post(client, "inventory/receive", {"sku": "ABC", "warehouse_id": "W9", "quantity": 1})
    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "INVALID_INPUT",
        "message": "Warehouse 'W9' is not registered.",
        "details": {"field": "warehouse_id"},
    }


def test_malformed_json_is_400(client) -> None:
    response = client.post(
        "/v1/inventory/receive",
        data="{not json",
        content_type="application/json",
        HTTP_X_API_KEY=DEV_ADMIN_API_KEY,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


def test_missing_field_is_400(client) -> None:
    response = _post(client, "inventory/reserve", {"sku": "ABC"})
    assert response.status_code == 400
    assert response.json()["ok"] is False


def test_release_with_non_string_handle_is_400(client) -> None:
    _stocked(client)
    response = _post(client, "inventory/release", {"handle_id": ["x"]})
    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"field": "handle_id"}


def test_reorder_point_keeps_omitted_reorder_quantity(client) -> None:
    _stocked(client, quantity=3)
    _post(client, "inventory/reorder-point", {
        "sku": "ABC", "warehouse_id": "W1", "reorder_point": 5, "reorder_quantity": 20,
    })
    _post(client, "inventory/reorder-point", {"sku": "ABC", "warehouse_id": "W1", "reorder_point": 6})

    items = _get(client, "inventory/items").json()["data"]
    assert (items[0]["reorder_point"], items[0]["reorder_quantity"]) == (6, 20)


def test_rename_warehouse(client) -> None:
    _stocked(client)
    _post(client, "inventory/warehouses/rename", {"warehouse_id": "W1", "name": "Flagship"})
    warehouses = _get(client, "inventory/warehouses").json()["data"]
    assert warehouses == [{"warehouse_id": "W1", "name": "Flagship"}]


# ══════════════════════════════════════════════════════════════
# PRICING
# ══════════════════════════════════════════════════════════════

def _seed_price_books(client) -> None:
    _post(client, "pricing/price-books/upsert", {
        "price_book_id": "PB1",
        "name": "Base",
        "currency": "USD",
        "is_default": True,
        "prices": {"P1": 1000},
    })
    _post(client, "pricing/price-books/upsert", {
        "price_book_id": "PB2",
        "name": "Wholesale 2024",
        "currency": "USD",
        "customer_group_id": "wholesale",
        "valid_from": "2024-01-01T00:00:00+00:00",
        "valid_to": "2024-12-31T23:59:59+00:00",
        "prices": {"P1": 800},
    })


def test_resolve_price_scenario(client) -> None:
    _seed_price_books(client)
    as_of = "2024-06-01T00:00:00+00:00"

    wholesale = _get(client, "pricing/resolve", {
        "product_id": "P1", "currency": "USD", "customer_group_id": "wholesale", "as_of": as_of,
    })
    assert wholesale.json()["data"]["price_book_id"] == "PB2"
    assert wholesale.json()["data"]["unit_price"] == {"amount": 800, "currency": "USD"}

    retail = _get(client, "pricing/resolve", {
        "product_id": "P1", "customer_group_id": "retail", "as_of": as_of,
    })
    assert retail.json()["data"]["price_book_id"] == "PB1"

    euro = _get(client, "pricing/resolve", {
        "product_id": "P1", "currency": "EUR", "customer_group_id": "wholesale", "as_of": as_of,
    })
    assert euro.status_code == 404
    assert euro.json()["error"]["code"] == "NO_PRICE_FOUND"


def test_resolve_rejects_bad_quantity(client) -> None:
    _seed_price_books(client)
    response = _get(client, "pricing/resolve", {"product_id": "P1", "quantity": "many"})
    assert response.status_code == 400


def test_upsert_with_scalar_quantity_breaks_is_400(client) -> None:
    response = _post(client, "pricing/price-books/upsert", {
        "price_book_id": "PB1", "name": "Base", "currency": "USD",
        "prices": {"P1": 1000}, "quantity_breaks": {"P1": 5},
    })
    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"field": "quantity_breaks"}


def test_upsert_cannot_strip_the_only_default(client) -> None:
    _seed_price_books(client)
    response = _post(client, "pricing/price-books/upsert", {
        "price_book_id": "PB1", "name": "Base", "currency": "EUR",
        "is_default": True, "prices": {"P1": 1000},
    })
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DEFAULT_PRICE_BOOK_REQUIRED"


def test_second_standing_default_conflicts(client) -> None:
    _seed_price_books(client)
    response = _post(client, "pricing/price-books/upsert", {
        "price_book_id": "PB3", "name": "Other", "currency": "USD",
        "is_default": True, "prices": {"P1": 1},
    })
    assert response.status_code == 409
    assert response.json()["error"]["details"] == {"currency": "USD", "existing_ids": ["PB1"]}


def test_delete_and_promote(client) -> None:
    _seed_price_books(client)

    blocked = _post(client, "pricing/price-books/delete", {"price_book_id": "PB1"})
    assert blocked.status_code == 409
    assert blocked.json()["error"]["code"] == "DEFAULT_PRICE_BOOK_REQUIRED"

    missing = _post(client, "pricing/price-books/delete", {"price_book_id": "NOPE"})
    assert missing.status_code == 404

    promoted = _post(client, "pricing/price-books/promote", {"price_book_id": "PB2"})
    assert promoted.json()["data"]["is_default"] is True

    deleted = _post(client, "pricing/price-books/delete", {"price_book_id": "PB1"})
    assert deleted.json() == {"ok": True, "data": {"price_book_id": "PB1", "deleted": True}}


def test_list_price_books(client) -> None:
    _seed_price_books(client)
    books = _get(client, "pricing/price-books", {"currency": "USD"}).json()["data"]
    assert [book["price_book_id"] for book in books] == ["PB1", "PB2"]


def test_dependencies_follow_commerce_setting(settings) -> None:
    settings.COMMERCE = {"ACCEPTED_CURRENCIES": ["EUR"], "DEFAULT_CURRENCY": "EUR"}
    reset_dependencies()
    deps = build_dependencies()
    assert deps.settings.default_currency == "EUR"
    assert deps.catalog.settings.accepted_currencies == ("EUR",)
