"""
Commerce Django Adapter - API-Key Principals
===========================================
The engines assume an authorized caller. This module is where the
caller does the checking: an API key resolves to a principal, and every
endpoint names the permission it needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

PERMISSION_INVENTORY_READ = "commerce.inventory.read"
PERMISSION_INVENTORY_WRITE = "commerce.inventory.write"
PERMISSION_PRICING_READ = "commerce.pricing.read"
PERMISSION_PRICING_WRITE = "commerce.pricing.write"

ALL_PERMISSIONS = frozenset({
    PERMISSION_INVENTORY_READ,
    PERMISSION_INVENTORY_WRITE,
    PERMISSION_PRICING_READ,
    PERMISSION_PRICING_WRITE,
})

HEADER_API_KEY = "x-api-key"


@dataclass(frozen=True)
class ApiPrincipal:
    actor_id: str
    permissions: frozenset

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        permissions = frozenset(self.permissions)
        unknown = sorted(permissions - ALL_PERMISSIONS)
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(unknown)}.")
        object.__setattr__(self, "permissions", permissions)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass(frozen=True)
class AuthRejection:
    code: str
    message: str
    status: int

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": {}}


class ApiKeyProvider(Protocol):
    def resolve_api_key(self, api_key: str) -> ApiPrincipal | None:
        ...


class InMemoryApiKeyProvider:
    """Deterministic in-memory key table for tests and local runs."""

    def __init__(self, api_key_to_principal: Mapping[str, ApiPrincipal] | None = None):
        normalized: dict[str, ApiPrincipal] = {}
        for api_key, principal in (api_key_to_principal or {}).items():
            if not isinstance(api_key, str) or not api_key.strip():
                raise ValueError("API key must be a non-empty string.")
            if not isinstance(principal, ApiPrincipal):
                raise ValueError("Principal must be ApiPrincipal.")
            normalized[api_key.strip()] = principal
        self._api_key_to_principal = normalized

    def resolve_api_key(self, api_key: str) -> ApiPrincipal | None:
        if not isinstance(api_key, str):
            return None
        return self._api_key_to_principal.get(api_key.strip())

    @classmethod
    def from_settings(cls, api_keys: Mapping[str, Any]) -> InMemoryApiKeyProvider:
        """
        Build from the ``COMMERCE["API_KEYS"]`` setting:
            {"<key>": {"actor_id": "...", "permissions": ["commerce..."]}}
        """
        return cls({
            api_key: ApiPrincipal(
                actor_id=entry["actor_id"],
                permissions=frozenset(entry.get("permissions", ())),
            )
            for api_key, entry in api_keys.items()
        })


def authorize(
    headers: Mapping[str, Any],
    provider: ApiKeyProvider,
    permission: str,
) -> ApiPrincipal | AuthRejection:
    normalized = {str(k).strip().lower(): str(v).strip() for k, v in headers.items()}
    api_key = normalized.get(HEADER_API_KEY)
    if not api_key:
        return AuthRejection(
            code="AUTH_MISSING",
            message=f"Header '{HEADER_API_KEY}' is required.",
            status=401,
        )
    principal = provider.resolve_api_key(api_key)
    if principal is None:
        return AuthRejection(
            code="AUTH_INVALID",
            message="API key is not recognized.",
            status=401,
        )
    if not principal.has_permission(permission):
        return AuthRejection(
            code="PERMISSION_DENIED",
            message=f"Actor '{principal.actor_id}' lacks '{permission}'.",
            status=403,
        )
    return principal
