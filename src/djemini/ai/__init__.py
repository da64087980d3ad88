from djemini.ai.client import AIClient
from djemini.ai.schemas import (
    CategorizationResponse,
    CategoryAssignment,
    PlaylistFilters,
    PlaylistSuggestion,
    SuggestionResponse,
)
from djemini.ai.service import AIService, build_ai_service

__all__ = [
    "AIClient",
    "AIService",
    "CategorizationResponse",
    "CategoryAssignment",
    "PlaylistFilters",
    "PlaylistSuggestion",
    "SuggestionResponse",
    "build_ai_service",
]
