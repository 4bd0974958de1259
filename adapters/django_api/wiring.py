"""
Commerce Django Adapter - Wiring
================================
Builds the engine graph once per process from Django settings:

    COMMERCE = {
        "ACCEPTED_CURRENCIES": ["USD", "EUR"],
        "DEFAULT_CURRENCY": "USD",
        "API_KEYS": {...},
    }

Adapter-only glue: records live in an InMemoryEntityStore.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from django.conf import settings as django_settings

from adapters.django_api.auth import (
    ALL_PERMISSIONS,
    PERMISSION_INVENTORY_READ,
    PERMISSION_INVENTORY_WRITE,
    PERMISSION_PRICING_READ,
    ApiKeyProvider,
    InMemoryApiKeyProvider,
)
from core.config.settings import CommerceSettings
from core.store.memory import InMemoryEntityStore
from core.store.protocol import EntityStore
from core.time.clock import SystemClock
from engines.inventory.ledger import InventoryLedger
from engines.pricing.catalog import PriceBookCatalog

logger = logging.getLogger("commerce.api")

DEV_ADMIN_API_KEY = "dev-admin-key"
DEV_CLERK_API_KEY = "dev-clerk-key"

DEV_API_KEYS = {
    DEV_ADMIN_API_KEY: {
        "actor_id": "dev-admin",
        "permissions": sorted(ALL_PERMISSIONS),
    },
    DEV_CLERK_API_KEY: {
        "actor_id": "dev-clerk",
        "permissions": [
            PERMISSION_INVENTORY_READ,
            PERMISSION_INVENTORY_WRITE,
            PERMISSION_PRICING_READ,
        ],
    },
}


@dataclass(frozen=True)
class CommerceDependencies:
    settings: CommerceSettings
    store: EntityStore
    ledger: InventoryLedger
    catalog: PriceBookCatalog
    auth_provider: ApiKeyProvider


_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: CommerceDependencies | None = None


def _load_settings() -> dict:
    return dict(getattr(django_settings, "COMMERCE", None) or {})


def _build() -> CommerceDependencies:
    raw = _load_settings()
    commerce_settings = CommerceSettings.from_mapping(raw)
    clock = SystemClock()
    store = InMemoryEntityStore()
    deps = CommerceDependencies(
        settings=commerce_settings,
        store=store,
        ledger=InventoryLedger(store, clock=clock),
        catalog=PriceBookCatalog(store, settings=commerce_settings, clock=clock),
        auth_provider=InMemoryApiKeyProvider.from_settings(
            raw.get("API_KEYS", DEV_API_KEYS)
        ),
    )
    logger.info(
        "Commerce dependencies built (currencies: "
        f"{', '.join(commerce_settings.accepted_currencies) or 'any'})"
    )
    return deps


def build_dependencies() -> CommerceDependencies:
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _build()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the cached graph so the next request rebuilds it (tests)."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None
