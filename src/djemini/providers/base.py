from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from djemini.store.models import RemoteItem, SourceCandidate


class CatalogProvider(ABC):
    """
    Abstract interface for a remote music catalog (YouTube, ...).

    Implementations translate their client library's failures into
    djemini.errors variants; callers never see raw library exceptions.
    """

    name: str

    # ---- reads ----

    @abstractmethod
    def list_my_playlists(self) -> Iterable[SourceCandidate]:
        """The user's own collections, paginated transparently."""
        raise NotImplementedError

    @abstractmethod
    def get_playlist_title(self, remote_id: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def list_liked_items(self) -> Iterable[RemoteItem]:
        raise NotImplementedError

    @abstractmethod
    def list_playlist_items(self, remote_id: str) -> Iterable[RemoteItem]:
        raise NotImplementedError

    # ---- writes (consume quota) ----

    @abstractmethod
    def create_playlist(self, name: str, description: str, privacy: str) -> str:
        """Create a remote playlist and return its remote id."""
        raise NotImplementedError

    @abstractmethod
    def add_item(self, remote_playlist_id: str, external_item_id: str) -> None:
        raise NotImplementedError
