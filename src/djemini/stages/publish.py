"""
publish.py

Publisher: mirror local playlists to the remote platform.

Quota is the scarce resource here, so the remote playlist id is stored
the moment it exists and every attempted add is recorded per item. A
halted run resumes with the members not yet attempted, even when
synthesis rebuilt the membership in between, and never creates the
remote playlist twice.
"""

from __future__ import annotations

import time
from typing import Callable

from djemini import config
from djemini.errors import QuotaExceeded, TransientError
from djemini.logger import get_logger
from djemini.pipeline.run_state import PlaylistPublishReport, PublishReport
from djemini.providers.base import CatalogProvider
from djemini.store import Playlist, PlaylistWithStats, Store

logger = get_logger(__name__)


def remote_description(playlist: Playlist) -> str:
    if playlist.description:
        return playlist.description
    return config.PLAYLIST_DESCRIPTION_TEMPLATE.format(
        category_type=playlist.category_type,
        category_value=playlist.category_value,
    )


class Publisher:
    def __init__(
        self,
        store: Store,
        catalog: CatalogProvider,
        *,
        privacy: str = config.DEFAULT_PRIVACY_STATUS,
        playlist_delay_sec: float = config.DEFAULT_PUBLISH_DELAY_SEC,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.catalog = catalog
        self.privacy = privacy
        self.playlist_delay_sec = playlist_delay_sec
        self._sleep = sleep

    def publish(self) -> PublishReport:
        report = PublishReport()
        attempted = 0

        for pl in self.store.list_playlists():
            if pl.is_published:
                logger.debug("Skipping %s: already published as %s", pl.name, pl.remote_id)
                report.already_published += 1
                continue
            if pl.member_count == 0:
                logger.debug("Skipping %s: no members", pl.name)
                report.skipped_empty += 1
                continue

            if attempted and self.playlist_delay_sec > 0:
                self._sleep(self.playlist_delay_sec)
            attempted += 1

            if self._publish_one(pl, report):
                report.halted = True
                logger.error("Quota exhausted; publish halted at %s", pl.name)
                break

        logger.info(
            "Publish done: created=%d resumed=%d added=%d failed=%d "
            "already_published=%d empty=%d%s",
            report.created,
            report.resumed,
            report.added,
            report.failed,
            report.already_published,
            report.skipped_empty,
            " (halted: quota)" if report.halted else "",
        )
        return report

    def _publish_one(self, pl: PlaylistWithStats, report: PublishReport) -> bool:
        """Publish a single playlist. Returns True when quota halted the run."""
        pr = PlaylistPublishReport(
            playlist_id=pl.id,
            name=pl.name,
            remote_id=pl.remote_id,
            resumed=pl.remote_id is not None,
        )
        report.playlists.append(pr)

        remote_id = pl.remote_id
        if remote_id is None:
            try:
                remote_id = self.catalog.create_playlist(
                    pl.name, remote_description(pl), self.privacy
                )
            except QuotaExceeded as e:
                pr.error = str(e)
                return True
            except TransientError as e:
                logger.warning("Could not create %s: %s", pl.name, e)
                pr.error = str(e)
                return False

            self.store.set_playlist_remote_id(pl.id, remote_id)
            pr.remote_id = remote_id
            logger.info("Created remote playlist %s (%s)", pl.name, remote_id)
        else:
            logger.info(
                "Resuming %s (%s): %d/%d tracks already attempted",
                pl.name,
                remote_id,
                pl.attempted_count,
                pl.member_count,
            )

        for item_id in self.store.list_pending_members(pl.id):
            try:
                self.catalog.add_item(remote_id, item_id)
                pr.added += 1
            except QuotaExceeded as e:
                pr.error = str(e)
                return True
            except TransientError as e:
                logger.warning("Could not add %s to %s: %s", item_id, pl.name, e)
                pr.failed += 1

            self.store.record_publish_attempt(pl.id, item_id)

        self.store.mark_playlist_published(pl.id)
        pr.complete = True
        logger.info("Published %s: added=%d failed=%d", pl.name, pr.added, pr.failed)
        return False
