"""
Commerce Core - Error Base Types
================================
Every failure raised by the commerce engines derives from CommerceError
and carries a stable machine-readable ``code``. Adapters map the code to
their transport; engines never swallow these.
"""

from __future__ import annotations


class CommerceError(Exception):
    """Base error for commerce engine operations."""

    code = "COMMERCE_ERROR"

    def details(self) -> dict:
        return {}


class InvalidInputError(CommerceError, ValueError):
    """Rejected before any state mutation (bad quantity, currency, ...)."""

    code = "INVALID_INPUT"

    def __init__(self, message: str, *, field_name: str | None = None):
        self.field_name = field_name
        super().__init__(message)

    def details(self) -> dict:
        if self.field_name is None:
            return {}
        return {"field": self.field_name}


def require_positive_int(value, field_name: str) -> int:
    # bool is an int subclass; True is not a quantity.
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(
            f"{field_name} must be a positive integer, got {value!r}.",
            field_name=field_name,
        )
    return value


def require_non_negative_int(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(
            f"{field_name} must be a non-negative integer, got {value!r}.",
            field_name=field_name,
        )
    return value


def require_identifier(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(
            f"{field_name} must be a non-empty string.",
            field_name=field_name,
        )
    return value.strip()
