from __future__ import annotations

from typing import Callable, Dict

from djemini.auth.base import AuthProvider
from djemini.auth.providers.youtube import YouTubeOAuthProvider

_FACTORIES: Dict[str, Callable[[], AuthProvider]] = {
    "youtube": YouTubeOAuthProvider,
}

_PROVIDERS: Dict[str, AuthProvider] = {}


def get_provider(name: str = "youtube") -> AuthProvider:
    key = (name or "").strip().lower()
    if key not in _FACTORIES:
        raise ValueError(f"Unknown auth provider: {name}")
    if key not in _PROVIDERS:
        _PROVIDERS[key] = _FACTORIES[key]()
    return _PROVIDERS[key]


def reset_providers() -> None:
    _PROVIDERS.clear()
