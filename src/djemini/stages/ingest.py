"""
ingest.py

Ingestor: pull a source's items from the remote catalog, normalize
titles, drop non-music uploads and upsert the rest.

A source's listing is fetched to completion before anything is written,
so a failure part-way through pagination leaves the store untouched.
"""

from __future__ import annotations

from typing import Iterable, Optional

from djemini.errors import NotFound, QuotaExceeded, TransientError
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult, SourceSyncReport, SyncReport
from djemini.providers.base import CatalogProvider
from djemini.providers.youtube.filters import (
    extract_artist,
    non_music_reason,
    normalize_title,
)
from djemini.store import Item, RemoteItem, Source, Store
from djemini.store.models import SOURCE_KIND_LIKED

logger = get_logger(__name__)


def normalize_items(
    remote_items: Iterable[RemoteItem], source_id: Optional[int], report: SourceSyncReport
) -> list[Item]:
    """Dedupe by id (first wins), drop non-music, split artist from title."""
    seen: set[str] = set()
    items: list[Item] = []

    for ri in remote_items:
        report.fetched += 1

        if ri.external_id in seen:
            report.duplicates += 1
            continue
        seen.add(ri.external_id)

        raw_title = normalize_title(ri.title)
        reason = non_music_reason(raw_title, ri.publisher)
        if reason is not None:
            logger.debug("Skipping %s (%r): matched %r", ri.external_id, raw_title, reason)
            report.filtered += 1
            continue

        artist, title = extract_artist(raw_title, ri.publisher)
        items.append(
            Item(id=ri.external_id, title=title, artist=artist, source_id=source_id)
        )

    return items


class Ingestor:
    def __init__(self, store: Store, catalog: CatalogProvider):
        self.store = store
        self.catalog = catalog

    def _fetch(self, source: Source) -> list[RemoteItem]:
        if source.kind == SOURCE_KIND_LIKED:
            return list(self.catalog.list_liked_items())
        if not source.remote_id:
            raise NotFound(f"Source [{source.id}] has no remote playlist id")
        return list(self.catalog.list_playlist_items(source.remote_id))

    def sync(self, source_id: int) -> SourceSyncReport:
        source = self.store.get_source(source_id)
        if source is None:
            raise NotFound(f"Source [{source_id}] not found")

        logger.info("Syncing %s...", source.name)
        report = SourceSyncReport(source_id=source.id, name=source.name)

        remote_items = self._fetch(source)
        items = normalize_items(remote_items, source.id, report)

        report.inserted = self.store.upsert_items(items)
        report.existing = len(items) - report.inserted
        self.store.touch_source_sync_time(source.id)

        logger.info(
            "Synced %s: fetched=%d new=%d existing=%d non_music=%d",
            source.name,
            report.fetched,
            report.inserted,
            report.existing,
            report.filtered,
        )
        return report

    def sync_all(self) -> SyncReport:
        """
        Sync every source in creation order.

        A transient failure is tallied and the next source proceeds;
        quota exhaustion stops the run.
        """
        report = SyncReport()
        sources = self.store.list_sources()
        if not sources:
            logger.warning('No sources tracked. Add one with "djemini sources add".')
            return report

        for source in sources:
            try:
                report.sources.append(self.sync(source.id))
            except QuotaExceeded as e:
                logger.error("Quota exhausted while syncing %s: %s", source.name, e)
                report.sources.append(
                    SourceSyncReport(
                        source_id=source.id,
                        name=source.name,
                        state=RunResult.QUOTA_EXHAUSTED,
                        error=str(e),
                    )
                )
                report.halted = True
                break
            except TransientError as e:
                logger.warning("Sync failed for %s: %s", source.name, e)
                report.sources.append(
                    SourceSyncReport(
                        source_id=source.id,
                        name=source.name,
                        state=RunResult.FAILED,
                        error=str(e),
                    )
                )

        return report
