"""
sources.py

SourceCatalog: choosing which remote collections djemini tracks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from djemini import config
from djemini.errors import InvalidReference, NotFound, UpstreamError
from djemini.logger import get_logger
from djemini.providers.base import CatalogProvider
from djemini.store import Source, SourceCandidate, SourceWithStats, Store
from djemini.store.models import SOURCE_KIND_LIKED, SOURCE_KIND_PLAYLIST

logger = get_logger(__name__)

LIKED_REF = "liked"
LIKED_NAME = "Liked Music"

_LIST_PARAM_RE = re.compile(
    r"^(?:https?://)?(?:(?:www|m|music)\.)?youtube\.com/[^?#\s]*[?&](?:[^#\s]*&)?list=([^&#\s]+)",
    re.IGNORECASE,
)
_BARE_ID_RE = re.compile(r"^(?:LL|(?:PL|OL|RD|UU|FL)[A-Za-z0-9_-]+)$")


def parse_playlist_ref(ref: str) -> Optional[str]:
    """
    Pull a playlist id out of a URL or bare id.

    Returns LIKED_PLAYLIST_ID for "liked" and list=LL; None when nothing
    usable is found.
    """
    ref = (ref or "").strip()
    if not ref:
        return None
    if ref.lower() == LIKED_REF:
        return config.LIKED_PLAYLIST_ID

    match = _LIST_PARAM_RE.search(ref)
    if match:
        return match.group(1)

    if _BARE_ID_RE.match(ref):
        return ref
    return None


def fallback_name(remote_id: str) -> str:
    return f"Playlist {remote_id[:8]}…"


@dataclass
class AddResult:
    added: list[Source] = field(default_factory=list)
    skipped: list[SourceCandidate] = field(default_factory=list)


class SourceCatalog:
    def __init__(self, store: Store, catalog: Optional[CatalogProvider] = None):
        self.store = store
        self.catalog = catalog

    def _require_catalog(self) -> CatalogProvider:
        if self.catalog is None:
            raise RuntimeError("SourceCatalog needs a remote catalog for this operation")
        return self.catalog

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def list(self) -> list[SourceWithStats]:
        return self.store.list_sources()

    def discover(self) -> list[SourceCandidate]:
        """The user's remote playlists, flagged when already tracked."""
        catalog = self._require_catalog()
        out: list[SourceCandidate] = []
        for c in catalog.list_my_playlists():
            tracked = self.store.find_source_by_remote_id(c.remote_id) is not None
            out.append(
                SourceCandidate(
                    remote_id=c.remote_id,
                    title=c.title,
                    item_count=c.item_count,
                    already_tracked=tracked,
                )
            )
        logger.info(
            "Discovered %d playlists (%d already tracked)",
            len(out),
            sum(1 for c in out if c.already_tracked),
        )
        return out

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def add(self, candidates: Iterable[SourceCandidate]) -> AddResult:
        result = AddResult()
        for c in candidates:
            if self.store.find_source_by_remote_id(c.remote_id) is not None:
                logger.info("Already tracking %s (%s)", c.title, c.remote_id)
                result.skipped.append(c)
                continue
            source = self.store.upsert_source(SOURCE_KIND_PLAYLIST, c.title, c.remote_id)
            logger.info("Added source [%d] %s", source.id, source.name)
            result.added.append(source)
        return result

    def add_liked(self) -> tuple[Source, bool]:
        existing = self.store.find_liked_source()
        if existing is not None:
            logger.info("Liked music is already tracked as [%d]", existing.id)
            return existing, False
        source = self.store.upsert_source(SOURCE_KIND_LIKED, LIKED_NAME)
        logger.info("Added source [%d] %s", source.id, source.name)
        return source, True

    def add_by_url(self, ref: str) -> tuple[Source, bool]:
        remote_id = parse_playlist_ref(ref)
        if remote_id is None:
            raise InvalidReference(
                f"Could not find a playlist id in {ref!r} "
                "(expected https://music.youtube.com/playlist?list=...)"
            )

        if remote_id == config.LIKED_PLAYLIST_ID:
            return self.add_liked()

        existing = self.store.find_source_by_remote_id(remote_id)
        if existing is not None:
            logger.info("Already tracking %s (%s)", existing.name, remote_id)
            return existing, False

        name = self._lookup_name(remote_id)
        result = self.add([SourceCandidate(remote_id=remote_id, title=name)])
        return result.added[0], True

    def _lookup_name(self, remote_id: str) -> str:
        if self.catalog is None:
            return fallback_name(remote_id)
        try:
            title = self.catalog.get_playlist_title(remote_id)
        except UpstreamError as e:
            logger.warning("Could not fetch playlist title for %s: %s", remote_id, e)
            title = None
        return title or fallback_name(remote_id)

    def remove(self, source_id: int) -> Source:
        source = self.store.get_source(source_id)
        if source is None:
            raise NotFound(f"Source [{source_id}] not found")
        self.store.delete_source(source_id)
        logger.info("Removed source [%d] %s", source.id, source.name)
        return source
