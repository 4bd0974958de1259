"""
Commerce Core Config - Engine Settings
======================================
Admin-configurable knobs for the commerce engines. Currency policy is
data, not code: the accepted set comes from deployment settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from core.errors import InvalidInputError
from core.primitives.money import normalize_currency


@dataclass(frozen=True)
class CommerceSettings:
    """
    accepted_currencies: ISO 4217 codes the engines accept. Empty means any
                         well-formed code is accepted.
    default_currency:    Currency assumed by adapters when a request omits it.
    """

    accepted_currencies: Tuple[str, ...] = ()
    default_currency: Optional[str] = None

    def __post_init__(self) -> None:
        normalized = tuple(
            sorted({normalize_currency(code) for code in self.accepted_currencies})
        )
        object.__setattr__(self, "accepted_currencies", normalized)
        if self.default_currency is not None:
            default = normalize_currency(self.default_currency)
            object.__setattr__(self, "default_currency", default)
            if normalized and default not in normalized:
                raise InvalidInputError(
                    f"default_currency '{default}' is not an accepted currency.",
                    field_name="default_currency",
                )

    def check_currency(self, code) -> str:
        """Normalize ``code`` and enforce the accepted set."""
        currency = normalize_currency(code)
        if self.accepted_currencies and currency not in self.accepted_currencies:
            raise InvalidInputError(
                f"currency '{currency}' is not accepted; expected one of "
                f"{', '.join(self.accepted_currencies)}.",
                field_name="currency",
            )
        return currency

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> CommerceSettings:
        """Build from a Django-style ``COMMERCE`` settings dict."""
        data = dict(data or {})
        return cls(
            accepted_currencies=tuple(data.get("ACCEPTED_CURRENCIES", ())),
            default_currency=data.get("DEFAULT_CURRENCY"),
        )
