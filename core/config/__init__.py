"""
Commerce Core Config - Public API
=================================
"""

from core.config.settings import CommerceSettings

__all__ = [
    "CommerceSettings",
]
