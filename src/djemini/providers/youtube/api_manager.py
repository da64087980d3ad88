"""
api_manager.py

Retry logic and HTTP -> domain error translation for the YouTube Data API.

Responsibilities:
- Quota detection (structured reason first, raw body markers second)
- Retry with exponential backoff for transient failures
- Per-instance quota tripwire so no call is made after exhaustion
- Throttling between successful calls
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Optional, TypeVar

from googleapiclient.errors import HttpError

from djemini import config
from djemini.errors import (
    DjeminiError,
    QuotaExceeded,
    TransientError,
    Unauthenticated,
)
from djemini.logger import get_logger

logger = get_logger(__name__)
T = TypeVar("T")

SERVICE = "youtube"


# ============================================================
# Error detection helpers
# ============================================================


def _reasons(data: Any) -> list[str]:
    """
    Pull error.errors[].reason out of a decoded payload.

    googleapiclient exposes either the whole body or just the errors list
    as error_details depending on version; accept both.
    """
    if isinstance(data, dict):
        inner = data.get("error", data)
        data = inner.get("errors", []) if isinstance(inner, dict) else []
    if not isinstance(data, list):
        return []
    return [str(err.get("reason", "")) for err in data if isinstance(err, dict)]


def _is_quota_payload(data: Any) -> bool:
    return any(r in config.QUOTA_REASONS for r in _reasons(data))


def _http_status(e: HttpError) -> Optional[int]:
    status = getattr(e, "status_code", None)
    if status is None and getattr(e, "resp", None) is not None:
        status = getattr(e.resp, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _raw_body(e: HttpError) -> str:
    content = getattr(e, "content", b"") or b""
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="ignore")
    return str(content)


def _classify_http_error(e: HttpError, *, write: bool = False) -> str:
    """
    Returns: 'quota', 'auth', 'transient' or 'other'
    """
    if _is_quota_payload(getattr(e, "error_details", None)):
        return "quota"

    raw = _raw_body(e)
    try:
        if _is_quota_payload(json.loads(raw)):
            return "quota"
    except ValueError:
        pass

    lowered = raw.lower()
    if any(marker in lowered for marker in config.QUOTA_MARKERS):
        return "quota"

    status = _http_status(e)

    # Write calls treat any 403 as exhausted quota
    if status == 403 and write:
        return "quota"

    if status == 401:
        return "auth"

    if status in config.TRANSIENT_STATUSES:
        return "transient"

    return "other"


# ============================================================
# Retry engine
# ============================================================


class YouTubeApiManager:
    def __init__(
        self,
        *,
        max_retries: int = config.DEFAULT_MAX_RETRIES,
        backoff_base_sec: float = config.DEFAULT_BACKOFF_BASE_SEC,
        sleep_sec: float = config.DEFAULT_SLEEP_BETWEEN_CALLS_SEC,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max(1, int(max_retries))
        self.backoff_base_sec = backoff_base_sec
        self.sleep_sec = sleep_sec
        self._sleep = sleep
        self.quota_exhausted = False

    def mark_quota_exhausted(self) -> None:
        self.quota_exhausted = True

    def tripwire(self) -> None:
        if self.quota_exhausted:
            raise QuotaExceeded("YouTube quota exhausted", service=SERVICE)

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        name: str = "",
        *,
        write: bool = False,
    ) -> T:
        self.tripwire()

        # Mutations are attempted once; a retried insert could land twice
        attempts = 1 if write else self.max_retries

        last_exception: Optional[Exception] = None
        last_status: Optional[int] = None

        for attempt in range(attempts):
            try:
                result = operation()
                if self.sleep_sec > 0:
                    self._sleep(self.sleep_sec)
                return result

            except DjeminiError:
                raise

            except HttpError as e:
                kind = _classify_http_error(e, write=write)
                status = _http_status(e)

                if kind == "quota":
                    logger.warning("YouTube quota exhausted during %s", name or "call")
                    self.mark_quota_exhausted()
                    raise QuotaExceeded(
                        f"YouTube quota exhausted during {name}", service=SERVICE, status=status
                    ) from e

                if kind == "auth":
                    raise Unauthenticated(f"YouTube rejected the credential during {name}") from e

                if kind == "other":
                    raise TransientError(
                        f"{name} failed: HTTP {status}", service=SERVICE, status=status
                    ) from e

                last_exception = e
                last_status = status

            except Exception as e:
                last_exception = e
                last_status = None

            if attempt == attempts - 1:
                break

            sleep_time = self.backoff_base_sec * (2**attempt)
            logger.warning(
                f"{name} failed (attempt {attempt + 1}/{attempts}), "
                f"retrying in {sleep_time}s: {last_exception}"
            )
            self._sleep(sleep_time)

        raise TransientError(
            f"{name} failed after {attempts} attempt(s): {last_exception}",
            service=SERVICE,
            status=last_status,
        ) from last_exception
