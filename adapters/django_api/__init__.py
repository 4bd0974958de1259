"""
Commerce Django HTTP adapter.
Thin framework glue over the inventory ledger and price-book catalog.
"""

from adapters.django_api.wiring import (
    DEV_ADMIN_API_KEY,
    DEV_CLERK_API_KEY,
    build_dependencies,
    reset_dependencies,
)

__all__ = [
    "DEV_ADMIN_API_KEY",
    "DEV_CLERK_API_KEY",
    "build_dependencies",
    "reset_dependencies",
]
