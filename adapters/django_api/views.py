"""
Commerce Django Adapter - Views
===============================
Pass-through JSON views over the inventory ledger and the price-book
catalog. Each view names its HTTP method and required permission; the
engine call itself lives in a small ``_action`` function.

Response envelope:
    {"ok": true, "data": ...}
    {"ok": false, "error": {"code": ..., "message": ..., "details": {...}}}
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.auth import (
    AuthRejection,
    PERMISSION_INVENTORY_READ,
    PERMISSION_INVENTORY_WRITE,
    PERMISSION_PRICING_READ,
    PERMISSION_PRICING_WRITE,
    authorize,
)
from adapters.django_api.wiring import CommerceDependencies, build_dependencies
from core.errors import CommerceError, InvalidInputError
from core.time.temporal import parse_instant
from engines.pricing.models import PriceBook

logger = logging.getLogger("commerce.api")

_STATUS_BY_CODE = {
    "INVALID_INPUT": 400,
    "INSUFFICIENT_STOCK": 409,
    "INVALID_HANDLE": 409,
    "ITEM_IN_USE": 409,
    "NO_PRICE_FOUND": 404,
    "UNKNOWN_PRICE_BOOK": 404,
    "AMBIGUOUS_PRICE_BOOKS": 409,
    "DEFAULT_PRICE_BOOK_CONFLICT": 409,
    "DEFAULT_PRICE_BOOK_REQUIRED": 409,
}

Action = Callable[[CommerceDependencies, dict[str, Any]], Any]


def _json_ok(data: Any) -> JsonResponse:
    return JsonResponse({"ok": True, "data": data})


def _json_error(
    code: str,
    message: str,
    status: int = 400,
    details: dict | None = None,
) -> JsonResponse:
    return JsonResponse(
        {
            "ok": False,
            "error": {"code": code, "message": message, "details": details or {}},
        },
        status=status,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidInputError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise InvalidInputError("Request body must be a JSON object.")
    return parsed


def _parse_int(value: Any, field_name: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise InvalidInputError(
            f"{field_name} must be an integer.", field_name=field_name
        ) from exc


def _optional(params: dict[str, Any], field_name: str) -> Any:
    value = params.get(field_name)
    return None if value in (None, "") else value


def _dispatch(
    request: HttpRequest,
    *,
    method: str,
    permission: str,
    action: Action,
) -> JsonResponse:
    if request.method != method:
        return _json_error(
            "METHOD_NOT_ALLOWED", "Method not allowed for this endpoint.", status=405
        )

    deps = build_dependencies()
    principal = authorize(request.headers, deps.auth_provider, permission)
    if isinstance(principal, AuthRejection):
        logger.warning(f"Rejected {request.method} {request.path}: {principal.code}")
        return JsonResponse(
            {"ok": False, "error": principal.to_dict()}, status=principal.status
        )

    try:
        if method == "GET":
            params = {key: request.GET.get(key) for key in request.GET.keys()}
        else:
            params = _parse_json_body(request)
        data = action(deps, params)
    except CommerceError as exc:
        status = _STATUS_BY_CODE.get(exc.code, 400)
        logger.info(
            f"{request.method} {request.path} by '{principal.actor_id}' "
            f"failed: {exc.code}"
        )
        return _json_error(exc.code, str(exc), status=status, details=exc.details())
    except KeyError as exc:
        return _json_error(
            "INVALID_INPUT", f"Missing required field {exc}.", status=400
        )
    return _json_ok(data)


# ══════════════════════════════════════════════════════════════
# INVENTORY ACTIONS
# ══════════════════════════════════════════════════════════════

def _list_warehouses(deps, params):
    return [w.to_dict() for w in deps.ledger.list_warehouses()]


def _register_warehouse(deps, body):
    return deps.ledger.register_warehouse(body["warehouse_id"], body["name"]).to_dict()


def _rename_warehouse(deps, body):
    return deps.ledger.rename_warehouse(body["warehouse_id"], body["name"]).to_dict()


def _list_items(deps, params):
    items = deps.ledger.items(
        warehouse_id=_optional(params, "warehouse_id"),
        search=_optional(params, "search"),
    )
    return [item.to_dict() for item in items]


def _receive(deps, body):
    return deps.ledger.receive(
        body["sku"], body["warehouse_id"], body["quantity"]
    ).to_dict()


def _reserve(deps, body):
    return deps.ledger.reserve(
        body["sku"], body["warehouse_id"], body["quantity"]
    ).to_dict()


def _release(deps, body):
    handle = deps.ledger.open_reservation(body["handle_id"])
    return deps.ledger.release(handle).to_dict()


def _fulfill(deps, body):
    handle = deps.ledger.open_reservation(body["handle_id"])
    return deps.ledger.fulfill(handle).to_dict()


def _set_reorder_point(deps, body):
    # An omitted reorder_quantity keeps the configured one.
    extra = {}
    if "reorder_quantity" in body:
        extra["reorder_quantity"] = body["reorder_quantity"]
    return deps.ledger.set_reorder_point(
        body["sku"],
        body["warehouse_id"],
        body.get("reorder_point"),
        **extra,
    ).to_dict()


def _status(deps, params):
    return deps.ledger.status(params["sku"], params["warehouse_id"]).to_dict()


def _low_stock(deps, params):
    return [s.to_dict() for s in deps.ledger.reorder_suggestions()]


# ══════════════════════════════════════════════════════════════
# PRICING ACTIONS
# ══════════════════════════════════════════════════════════════

def _list_price_books(deps, params):
    books = deps.catalog.list_price_books(currency=_optional(params, "currency"))
    return [book.to_dict() for book in books]


def _upsert_price_book(deps, body):
    return deps.catalog.upsert_price_book(PriceBook.from_dict(body)).to_dict()


def _delete_price_book(deps, body):
    deps.catalog.delete_price_book(body["price_book_id"])
    return {"price_book_id": body["price_book_id"], "deleted": True}


def _promote_price_book(deps, body):
    return deps.catalog.promote_default(body["price_book_id"]).to_dict()


def _resolve_price(deps, params):
    currency = _optional(params, "currency") or deps.settings.default_currency
    if currency is None:
        raise InvalidInputError("currency is required.", field_name="currency")
    quantity = params.get("quantity")
    return deps.catalog.resolve_price(
        params["product_id"],
        currency,
        _optional(params, "customer_group_id"),
        as_of=parse_instant(_optional(params, "as_of"), "as_of"),
        quantity=1 if quantity in (None, "") else _parse_int(quantity, "quantity"),
    ).to_dict()


# ══════════════════════════════════════════════════════════════
# VIEWS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def warehouses_list_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="GET", permission=PERMISSION_INVENTORY_READ,
        action=_list_warehouses,
    )


@csrf_exempt
def warehouses_register_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_INVENTORY_WRITE,
        action=_register_warehouse,
    )


@csrf_exempt
def warehouses_rename_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_INVENTORY_WRITE,
        action=_rename_warehouse,
    )


@csrf_exempt
def inventory_items_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="GET", permission=PERMISSION_INVENTORY_READ,
        action=_list_items,
    )


@csrf_exempt
def inventory_receive_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_INVENTORY_WRITE,
        action=_receive,
    )


@csrf_exempt
def inventory_reserve_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_INVENTORY_WRITE,
        action=_reserve,
    )


@csrf_exempt
def inventory_release_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_INVENTORY_WRITE,
        action=_release,
    )


@csrf_exempt
def inventory_fulfill_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_INVENTORY_WRITE,
        action=_fulfill,
    )


@csrf_exempt
def inventory_reorder_point_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_INVENTORY_WRITE,
        action=_set_reorder_point,
    )


@csrf_exempt
def inventory_status_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="GET", permission=PERMISSION_INVENTORY_READ,
        action=_status,
    )


@csrf_exempt
def inventory_low_stock_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="GET", permission=PERMISSION_INVENTORY_READ,
        action=_low_stock,
    )


@csrf_exempt
def price_books_list_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="GET", permission=PERMISSION_PRICING_READ,
        action=_list_price_books,
    )


@csrf_exempt
def price_books_upsert_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_PRICING_WRITE,
        action=_upsert_price_book,
    )


@csrf_exempt
def price_books_delete_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_PRICING_WRITE,
        action=_delete_price_book,
    )


@csrf_exempt
def price_books_promote_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="POST", permission=PERMISSION_PRICING_WRITE,
        action=_promote_price_book,
    )


@csrf_exempt
def price_resolve_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(
        request, method="GET", permission=PERMISSION_PRICING_READ,
        action=_resolve_price,
    )
