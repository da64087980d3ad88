"""
Row types handed out by the Store and the remote adapters.

Plain dataclasses; nothing here talks to SQLite or the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


SOURCE_KIND_LIKED = "liked"
SOURCE_KIND_PLAYLIST = "playlist"
SOURCE_KINDS = (SOURCE_KIND_LIKED, SOURCE_KIND_PLAYLIST)


@dataclass(frozen=True)
class Source:
    id: int
    kind: str
    name: str
    remote_id: Optional[str]
    last_synced: Optional[str]
    created_at: str


@dataclass(frozen=True)
class SourceWithStats(Source):
    item_count: int = 0


@dataclass(frozen=True)
class Item:
    id: str
    title: str
    artist: Optional[str] = None
    source_id: Optional[int] = None
    added_at: str = ""
    classified: bool = False


@dataclass(frozen=True)
class Category:
    item_id: str
    type: str
    value: str
    confidence: float = 1.0
    created_at: str = ""


@dataclass(frozen=True)
class ItemProfile:
    """A classified item folded with its category values."""

    item_id: str
    moods: frozenset[str] = frozenset()
    genres: frozenset[str] = frozenset()
    energy: Optional[str] = None


@dataclass(frozen=True)
class Playlist:
    id: str
    name: str
    remote_id: Optional[str]
    category_type: str
    category_value: str
    description: Optional[str]
    published_at: Optional[str]
    created_at: str
    updated_at: str

    @property
    def is_published(self) -> bool:
        return self.remote_id is not None and self.published_at is not None


@dataclass(frozen=True)
class PlaylistWithStats(Playlist):
    member_count: int = 0
    attempted_count: int = 0


# ------------------------------------------------------------
# Remote DTOs
# ------------------------------------------------------------


@dataclass(frozen=True)
class SourceCandidate:
    remote_id: str
    title: str
    item_count: int = 0
    already_tracked: bool = False


@dataclass(frozen=True)
class RemoteItem:
    external_id: str
    title: str
    publisher: Optional[str] = None
