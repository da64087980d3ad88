"""
Typed shapes of the AI service's structured output.

parse_payload() is the single entry point: it tolerates markdown code
fences around the JSON and turns every decoding or validation failure
into InvalidAIResponse with the raw text attached.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Type, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from djemini.errors import InvalidAIResponse

M = TypeVar("M", bound=BaseModel)

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def _clean_tags(v: Any) -> Optional[List[str]]:
    if v is None:
        return None
    if isinstance(v, str):
        v = [v]
    if not isinstance(v, list):
        raise ValueError("expected a list of strings")

    out: List[str] = []
    for tag in v:
        if tag is None:
            continue
        t = str(tag).strip().lower()
        if t and t not in out:
            out.append(t)
    return out


# ============================================================
# Categorization
# ============================================================


class CategoryAssignment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # 1-based position in the prompt's item list
    index: int = Field(validation_alias=AliasChoices("index", "song_id", "id"))
    mood: Optional[List[str]] = None
    genre: Optional[List[str]] = None
    energy: Optional[str] = None

    @field_validator("mood", "genre", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> Optional[List[str]]:
        return _clean_tags(v)

    @field_validator("energy", mode="before")
    @classmethod
    def _energy(cls, v: Any) -> Optional[str]:
        if isinstance(v, list):
            v = next((x for x in v if x), None)
        if v is None:
            return None
        e = str(v).strip().lower()
        return e or None

    def restricted_to(self, types: tuple[str, ...]) -> "CategoryAssignment":
        """Drop dimensions that were not asked for."""
        return self.model_copy(
            update={t: None for t in ("mood", "genre", "energy") if t not in types}
        )


class CategorizationResponse(BaseModel):
    analyses: List[CategoryAssignment]


# ============================================================
# Playlist suggestions
# ============================================================


class PlaylistFilters(BaseModel):
    """
    Predicate over an item's categories.

    A dimension that is None (or came back as an empty list) is absent
    and always matches.
    """

    model_config = ConfigDict(extra="ignore")

    mood: Optional[List[str]] = None
    genre: Optional[List[str]] = None
    energy: Optional[List[str]] = None

    @field_validator("mood", "genre", "energy", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> Optional[List[str]]:
        tags = _clean_tags(v)
        return tags or None


class PlaylistSuggestion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str = ""
    filters: PlaylistFilters = Field(default_factory=PlaylistFilters)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        name = re.sub(r"\s+", " ", str(v or "")).strip()
        if not name:
            raise ValueError("playlist name is blank")
        return name

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v: Any) -> str:
        return str(v or "").strip()

    @field_validator("filters", mode="before")
    @classmethod
    def _filters(cls, v: Any) -> Any:
        return {} if v is None else v


class SuggestionResponse(BaseModel):
    playlists: List[PlaylistSuggestion]


# ============================================================
# Decoding
# ============================================================


def strip_code_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))
    if not text.startswith("{"):
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start : end + 1]
    return text


def parse_payload(raw: Optional[str], model: Type[M]) -> M:
    if not raw or not raw.strip():
        raise InvalidAIResponse("AI service returned an empty response", raw=raw or "")
    try:
        return model.model_validate_json(strip_code_fences(raw))
    except ValidationError as e:
        raise InvalidAIResponse(
            f"AI response did not match {model.__name__}: {e.error_count()} error(s)",
            raw=raw,
        ) from e
