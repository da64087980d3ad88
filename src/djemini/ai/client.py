"""
client.py

Thin wrapper around the OpenAI SDK, pointed at Gemini's
OpenAI-compatible endpoint by default.

This is the only module that inspects openai exceptions; everything
leaves here as a djemini.errors variant.
"""

from __future__ import annotations

from typing import Any, Optional

import openai

from djemini import config
from djemini.errors import (
    InvalidAIResponse,
    QuotaExceeded,
    TransientError,
    Unauthenticated,
)
from djemini.logger import get_logger

logger = get_logger(__name__)

SERVICE = "ai"


def _has_quota_marker(e: openai.APIStatusError) -> bool:
    text = f"{e.message} {e.body}".lower()
    return any(marker in text for marker in config.QUOTA_MARKERS)


def _translate_status_error(e: openai.APIStatusError, name: str) -> Exception:
    status = e.status_code
    if status == 429 or _has_quota_marker(e):
        return QuotaExceeded(
            f"AI quota exhausted during {name}", service=SERVICE, status=status
        )
    if status in (401, 403):
        return Unauthenticated(f"AI service rejected the API key ({status})")
    return TransientError(f"{name} failed: HTTP {status}", service=SERVICE, status=status)


class AIClient:
    def __init__(
        self,
        api_key: str,
        *,
        model: str = config.DEFAULT_AI_MODEL,
        base_url: str = config.DEFAULT_AI_BASE_URL,
        max_retries: int = config.DEFAULT_AI_MAX_RETRIES,
        timeout: float = config.DEFAULT_AI_TIMEOUT_SEC,
        client: Optional[Any] = None,
    ):
        self.model = model
        self._client = client or openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=max_retries,
            timeout=timeout,
        )

    def complete_json(self, prompt: str, *, name: str = "completion") -> str:
        """
        Send one prompt and return the raw text of the reply.

        Retries for connection errors, 408/409/429/5xx are handled by the
        SDK (max_retries); whatever still fails is translated here.
        """
        logger.debug("AI request %s (%d chars)", name, len(prompt))
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
            )
        except openai.APIStatusError as e:
            raise _translate_status_error(e, name) from e
        except openai.APIConnectionError as e:
            raise TransientError(f"{name} failed: {e}", service=SERVICE) from e
        except openai.APIError as e:
            raise TransientError(f"{name} failed: {e}", service=SERVICE) from e

        choices = getattr(resp, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise InvalidAIResponse(f"{name}: empty completion", raw="")
        return content
