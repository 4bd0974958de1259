"""
Commerce Entity Store - In-Memory Implementation
================================================
Thread-safe dictionary store used for bootstrap, tests and the HTTP
adapter's local runs.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Hashable, Optional

from core.store.protocol import ENTITY_KINDS

logger = logging.getLogger("commerce.store")


class UnknownEntityKindError(KeyError):
    """Store asked for a record kind it does not hold."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown entity kind '{kind}'.")


class InMemoryEntityStore:
    """
    Records keyed per kind. Each put replaces the whole record under the
    store lock, which is the atomic-visibility guarantee engines rely on.
    """

    def __init__(self):
        self._records: Dict[str, Dict[Hashable, Any]] = {
            kind: {} for kind in sorted(ENTITY_KINDS)
        }
        self._lock = threading.Lock()

    def _bucket(self, kind: str) -> Dict[Hashable, Any]:
        try:
            return self._records[kind]
        except KeyError:
            raise UnknownEntityKindError(kind) from None

    def get(self, kind: str, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._bucket(kind).get(key)

    def put(self, kind: str, key: Hashable, record: Any) -> None:
        with self._lock:
            self._bucket(kind)[key] = record
        logger.debug(f"Stored {kind} {key!r}")

    def delete(self, kind: str, key: Hashable) -> bool:
        with self._lock:
            removed = self._bucket(kind).pop(key, None) is not None
        if removed:
            logger.debug(f"Deleted {kind} {key!r}")
        return removed

    def values(self, kind: str) -> tuple:
        with self._lock:
            return tuple(self._bucket(kind).values())

    def count(self, kind: str) -> int:
        with self._lock:
            return len(self._bucket(kind))
