"""
synthesize.py

PlaylistSynthesizer: ask the AI service for named groupings over the
library's category values, then materialize each as a local playlist.
"""

from __future__ import annotations

import re
from typing import Sequence

from djemini import config
from djemini.ai.schemas import PlaylistFilters
from djemini.ai.service import AIService
from djemini.logger import get_logger
from djemini.pipeline.run_state import SynthesisReport, SynthesizedPlaylist
from djemini.store import ItemProfile, Store

logger = get_logger(__name__)


def snake_case(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip().lower())


def matches_filters(profile: ItemProfile, filters: PlaylistFilters) -> bool:
    """
    Every present dimension needs a hit; absent dimensions always match.
    Energy is single-valued, so an item without one never matches an
    energy filter.
    """
    if filters.mood and not profile.moods.intersection(filters.mood):
        return False
    if filters.genre and not profile.genres.intersection(filters.genre):
        return False
    if filters.energy and profile.energy not in filters.energy:
        return False
    return True


def select_members(
    profiles: Sequence[ItemProfile], filters: PlaylistFilters
) -> list[str]:
    return [p.item_id for p in profiles if matches_filters(p, filters)]


class PlaylistSynthesizer:
    def __init__(self, store: Store, ai: AIService):
        self.store = store
        self.ai = ai

    def synthesize(self) -> SynthesisReport:
        """
        InvalidAIResponse from the suggestion call propagates and nothing
        is written. Membership of a same-named playlist is rebuilt.
        """
        report = SynthesisReport()
        profiles = self.store.classified_item_profiles()
        report.classified_items = len(profiles)

        if not profiles:
            logger.warning('No classified items. Run "djemini classify" first.')
            return report

        moods = self.store.list_distinct_category_values("mood")
        genres = self.store.list_distinct_category_values("genre")
        energies = self.store.list_distinct_category_values("energy")
        logger.info(
            "Requesting playlist suggestions (%d moods, %d genres, %d energy levels)",
            len(moods),
            len(genres),
            len(energies),
        )

        suggestions = self.ai.suggest_playlists(moods, genres, energies)
        logger.info("Received %d suggestion(s)", len(suggestions))

        with self.store.transaction():
            for s in suggestions:
                members = select_members(profiles, s.filters)
                playlist, created = self.store.upsert_playlist(
                    s.name,
                    category_type=config.AI_GROUP_CATEGORY,
                    category_value=snake_case(s.name),
                    description=s.description or None,
                )
                if not created:
                    self.store.clear_membership(playlist.id)
                for item_id in members:
                    self.store.add_member(playlist.id, item_id)

                report.playlists.append(
                    SynthesizedPlaylist(
                        name=playlist.name,
                        description=s.description,
                        members=len(members),
                        created=created,
                    )
                )
                logger.info(
                    "%s %s: %d track(s)",
                    "Created" if created else "Refreshed",
                    playlist.name,
                    len(members),
                )

        return report
