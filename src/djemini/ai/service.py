from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from djemini.ai.client import AIClient
from djemini.ai.prompts import (
    analysis_types,
    build_categorization_prompt,
    build_suggestion_prompt,
)
from djemini.ai.schemas import (
    CategorizationResponse,
    CategoryAssignment,
    PlaylistSuggestion,
    SuggestionResponse,
    parse_payload,
)
from djemini.env import Environment
from djemini.logger import get_logger
from djemini.store.models import Item

logger = get_logger(__name__)


class CompletionClient(Protocol):
    def complete_json(self, prompt: str, *, name: str = ...) -> str: ...


class AIService:
    """Categorization and playlist-suggestion calls over one completion client."""

    def __init__(self, client: CompletionClient):
        self.client = client

    def categorize(
        self, items: Sequence[Item], analysis_type: str
    ) -> List[Tuple[Item, CategoryAssignment]]:
        """
        One call for the whole batch.

        Entries whose index falls outside the batch are discarded; fields
        for dimensions that were not requested are dropped.
        """
        types = analysis_types(analysis_type)
        raw = self.client.complete_json(
            build_categorization_prompt(items, analysis_type),
            name=f"categorize {len(items)} item(s)",
        )
        parsed = parse_payload(raw, CategorizationResponse)

        out: List[Tuple[Item, CategoryAssignment]] = []
        for analysis in parsed.analyses:
            pos = analysis.index - 1
            if pos < 0 or pos >= len(items):
                logger.debug("Discarding analysis with out-of-range index %d", analysis.index)
                continue
            out.append((items[pos], analysis.restricted_to(types)))
        return out

    def suggest_playlists(
        self,
        moods: Sequence[str],
        genres: Sequence[str],
        energies: Sequence[str],
    ) -> List[PlaylistSuggestion]:
        """Named groupings; a repeated name keeps its first occurrence."""
        raw = self.client.complete_json(
            build_suggestion_prompt(moods, genres, energies),
            name="suggest playlists",
        )
        parsed = parse_payload(raw, SuggestionResponse)

        seen: set[str] = set()
        out: List[PlaylistSuggestion] = []
        for suggestion in parsed.playlists:
            key = suggestion.name.lower()
            if key in seen:
                logger.debug("Dropping duplicate suggestion %r", suggestion.name)
                continue
            seen.add(key)
            out.append(suggestion)
        return out


def build_ai_service(env: Environment) -> AIService:
    client = AIClient(
        env.require_ai_key(),
        model=env.ai_model,
        base_url=env.ai_base_url,
        max_retries=env.ai_max_retries,
    )
    return AIService(client)
