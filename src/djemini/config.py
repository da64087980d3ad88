"""
config.py

Central configuration for djemini.

This file intentionally contains ONLY:
- Constants
- Tunables
- Keyword lists
- Regex patterns
- Vocabularies

It must NOT contain:
- Business logic
- API calls
- Reading environment variables
- Validation / side effects

Runtime configuration (env vars, paths) belongs in:
- env/env.py
- env/paths.py
"""

from __future__ import annotations

import re

# ============================================================
# FILES
# ============================================================

DB_FILENAME = "library.db"
OAUTH_TOKEN_FILENAME = "oauth_token.json"
CLIENT_SECRETS_FILENAME = "client_secret.json"

# ============================================================
# YOUTUBE API: SCOPES / PAGING
# ============================================================

YOUTUBE_OAUTH_SCOPES = [
    "https://www.googleapis.com/auth/youtube.readonly",
    "https://www.googleapis.com/auth/youtube",
]

# playlists.list / playlistItems.list / videos.list max page size
YOUTUBE_PAGE_SIZE = 50

# Special playlist id YouTube uses for the "Liked videos" collection
LIKED_PLAYLIST_ID = "LL"

PLAYLIST_URL_TEMPLATE = "https://music.youtube.com/playlist?list={playlist_id}"

# ============================================================
# REQUEST THROTTLING DEFAULTS (env.py may override)
# ============================================================

DEFAULT_SLEEP_BETWEEN_CALLS_SEC = 0.15
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE_SEC = 1.0

# Sleep between playlists during publish (catalog-mutation burst limit)
DEFAULT_PUBLISH_DELAY_SEC = 0.5

# Sleep between categorization batches (AI request-rate limit)
DEFAULT_BATCH_DELAY_SEC = 1.0

# ============================================================
# QUOTA DETECTION
# ============================================================

QUOTA_REASONS = {
    "quotaExceeded",
    "dailyLimitExceeded",
    "userRateLimitExceeded",
}

QUOTA_MARKERS = (
    "quota",
    "dailylimit",
    "resource_exhausted",
    "insufficient_quota",
)

TRANSIENT_STATUSES = (429, 500, 502, 503, 504)

# ============================================================
# INGESTION: ARTIST EXTRACTION
# ============================================================

# Priority order: the first separator present wins, not the leftmost one.
TITLE_SEPARATORS = [" - ", " – ", " — ", ": ", " | "]

# "Artist - Topic" auto-generated official artist channels
ARTIST_SUFFIX_PATTERN = re.compile(r"\s+-\s+Topic$", re.IGNORECASE)

UNKNOWN_TITLE = "Unknown"

# ============================================================
# INGESTION: NON-MUSIC FILTER
# ============================================================

NON_MUSIC_PATTERNS = [
    r"podcast",
    r"interview",
    r"talk show",
    r"documentary",
    r"news",
    r"vlog",
    r"review",
    r"reaction",
    r"tutorial",
    r"lesson",
    r"course",
]

COMPILED_NON_MUSIC_PATTERNS = [
    re.compile(p, re.IGNORECASE) for p in NON_MUSIC_PATTERNS
]

# ============================================================
# CLASSIFICATION
# ============================================================

CATEGORY_TYPES = ("mood", "genre", "energy")
ANALYSIS_TYPES = ("mood", "genre", "energy", "all")

MOOD_VOCABULARY = [
    "happy",
    "sad",
    "energetic",
    "calm",
    "romantic",
    "angry",
    "nostalgic",
    "melancholic",
    "uplifting",
    "dark",
    "chill",
    "party",
    "emotional",
    "empowering",
    "dreamy",
]

GENRE_VOCABULARY = [
    "pop",
    "rock",
    "hip-hop",
    "r&b",
    "electronic",
    "indie",
    "country",
    "jazz",
    "classical",
    "metal",
    "folk",
    "latin",
    "k-pop",
    "alternative",
    "edm",
    "soul",
    "funk",
    "reggae",
    "punk",
    "blues",
]

ENERGY_VOCABULARY = ["low", "medium", "high"]

DEFAULT_BATCH_SIZE = 15
MAX_BATCH_SIZE = 20

# The service does not return calibrated confidence
DEFAULT_CONFIDENCE = 1.0

# ============================================================
# AI SERVICE
# ============================================================

# Gemini through its OpenAI-compatible endpoint
DEFAULT_AI_MODEL = "gemini-2.5-flash"
DEFAULT_AI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_AI_MAX_RETRIES = 2
DEFAULT_AI_TIMEOUT_SEC = 60.0

MIN_SUGGESTIONS = 5
MAX_SUGGESTIONS = 10

# ============================================================
# SYNTHESIS / PUBLISH
# ============================================================

AI_GROUP_CATEGORY = "ai_group"
PLAYLIST_ID_PREFIX = "pl_"
PLAYLIST_DESCRIPTION_TEMPLATE = "Created by djemini - {category_type}: {category_value}"
DEFAULT_PRIVACY_STATUS = "private"
PRIVACY_STATUSES = ("private", "unlisted", "public")

# ============================================================
# LOGGING DEFAULTS (logger/ + env/ control actual behavior)
# ============================================================

DEFAULT_LOG_RETENTION = 30
DEFAULT_LOG_LEVEL = "INFO"
