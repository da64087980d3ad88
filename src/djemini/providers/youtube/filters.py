"""
filters.py

Pure title helpers used during ingestion.

This module:
- Contains NO I/O
- Contains NO API calls
- Contains NO state

All behavior is driven by config.py.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from djemini import config


# ============================================================
# Title normalization
# ============================================================


def normalize_title(title: Optional[str]) -> str:
    """
    Collapse runs of whitespace and trim. Empty input becomes UNKNOWN_TITLE.
    """
    if not title:
        return config.UNKNOWN_TITLE
    t = re.sub(r"\s+", " ", title).strip()
    return t or config.UNKNOWN_TITLE


# ============================================================
# Artist extraction
# ============================================================


def clean_artist_name(artist: Optional[str]) -> Optional[str]:
    """
    Strip the official-artist-channel marker ("Name - Topic").

    Returns None when nothing usable is left.
    """
    if not artist:
        return None
    cleaned = config.ARTIST_SUFFIX_PATTERN.sub("", artist.strip()).strip()
    return cleaned or None


def extract_artist(
    title: str, publisher: Optional[str] = None
) -> Tuple[Optional[str], str]:
    """
    Split "Artist - Song" style titles.

    Separators are tried in priority order; the first one present wins
    and splits at its first occurrence. Without a usable separator the
    publisher (channel) name becomes the artist.

    Returns:
        (artist, clean_title)
    """
    for sep in config.TITLE_SEPARATORS:
        if sep not in title:
            continue
        head, _, tail = title.partition(sep)
        if head.strip():
            return clean_artist_name(head), tail.strip() or head.strip()

    return clean_artist_name(publisher), title.strip()


# ============================================================
# Non-music exclusion
# ============================================================


def non_music_reason(title: str, publisher: Optional[str] = None) -> Optional[str]:
    """
    Return the first non-music pattern matched by title + publisher, else None.
    """
    text = f"{title} {publisher or ''}"
    for pattern in config.COMPILED_NON_MUSIC_PATTERNS:
        if pattern.search(text):
            return pattern.pattern
    return None


def is_non_music(title: str, publisher: Optional[str] = None) -> bool:
    return non_music_reason(title, publisher) is not None
