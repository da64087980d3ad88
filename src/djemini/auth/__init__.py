from __future__ import annotations

from djemini.auth.base import AuthHealthResult, AuthHealthStatus, AuthProvider
from djemini.auth.health import check
from djemini.auth.registry import get_provider

__all__ = [
    "AuthHealthResult",
    "AuthHealthStatus",
    "AuthProvider",
    "check",
    "get_provider",
]
