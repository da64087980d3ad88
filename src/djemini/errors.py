"""
errors.py

Closed set of error kinds raised across djemini.

Remote-call adapters (providers/youtube, ai) are the only place where
library exceptions are inspected; they translate into these variants so
stage logic switches on type, never on message text.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class DjeminiError(Exception):
    """Base error for every djemini failure."""


class NotFound(DjeminiError):
    """Referenced source or playlist does not exist."""


class InvalidReference(DjeminiError):
    """A URL or identifier could not be parsed."""


class Unauthenticated(DjeminiError):
    """Credential missing, expired or rejected."""


class ConstraintViolation(DjeminiError):
    """A store-level uniqueness or foreign-key invariant was breached."""


class UpstreamKind(str, Enum):
    QUOTA = "quota"
    TRANSIENT = "transient"


class UpstreamError(DjeminiError):
    """A remote call failed."""

    kind: UpstreamKind = UpstreamKind.TRANSIENT

    def __init__(
        self,
        message: str,
        *,
        service: str = "",
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.status = status

    @property
    def is_quota(self) -> bool:
        return self.kind == UpstreamKind.QUOTA


class QuotaExceeded(UpstreamError):
    """Remote quota exhausted. Terminal for the current command."""

    kind = UpstreamKind.QUOTA


class TransientError(UpstreamError):
    """Remote call failed for a non-quota reason. Skip the unit and continue."""

    kind = UpstreamKind.TRANSIENT


class InvalidAIResponse(DjeminiError):
    """AI output could not be parsed into the expected schema."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw

    @property
    def preview(self) -> str:
        return self.raw[:200]


__all__ = [
    "DjeminiError",
    "NotFound",
    "InvalidReference",
    "Unauthenticated",
    "ConstraintViolation",
    "UpstreamKind",
    "UpstreamError",
    "QuotaExceeded",
    "TransientError",
    "InvalidAIResponse",
]
