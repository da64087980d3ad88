from djemini.store.models import (
    Category,
    Item,
    ItemProfile,
    Playlist,
    PlaylistWithStats,
    RemoteItem,
    Source,
    SourceCandidate,
    SourceWithStats,
)
from djemini.store.store import MEMORY, Store, new_playlist_id, utc_now

__all__ = [
    "Category",
    "Item",
    "ItemProfile",
    "MEMORY",
    "Playlist",
    "PlaylistWithStats",
    "RemoteItem",
    "Source",
    "SourceCandidate",
    "SourceWithStats",
    "Store",
    "new_playlist_id",
    "utc_now",
]
