"""
Outcome types shared by stages, the runner and the CLI.

Stages fill in a report; the CLI and runner read it to choose the
RUN_STATUS line and the exit code.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from djemini.env import ConfigError
from djemini.errors import (
    InvalidReference,
    NotFound,
    QuotaExceeded,
    Unauthenticated,
)


class RunResult(str, Enum):
    OK = "ok"
    QUOTA_EXHAUSTED = "quota_exhausted"
    AUTH_INVALID = "auth_invalid"
    FAILED = "failed"
    SKIPPED = "skipped"


EXIT_OK = 0
EXIT_USAGE = 2
EXIT_QUOTA = 10
EXIT_AUTH = 12
EXIT_FAILED = 20

_EXIT_CODES = {
    RunResult.OK: EXIT_OK,
    RunResult.SKIPPED: EXIT_OK,
    RunResult.QUOTA_EXHAUSTED: EXIT_QUOTA,
    RunResult.AUTH_INVALID: EXIT_AUTH,
    RunResult.FAILED: EXIT_FAILED,
}


def exit_code_for(result: RunResult) -> int:
    return _EXIT_CODES[result]


def result_for_error(exc: BaseException) -> RunResult:
    if isinstance(exc, QuotaExceeded):
        return RunResult.QUOTA_EXHAUSTED
    if isinstance(exc, Unauthenticated):
        return RunResult.AUTH_INVALID
    return RunResult.FAILED


def exit_code_for_error(exc: BaseException) -> int:
    if isinstance(exc, (NotFound, InvalidReference, ConfigError)):
        return EXIT_USAGE
    return exit_code_for(result_for_error(exc))


# ------------------------------------------------------------------
# Ingestion
# ------------------------------------------------------------------


@dataclass
class SourceSyncReport:
    source_id: int
    name: str
    fetched: int = 0
    duplicates: int = 0
    filtered: int = 0
    inserted: int = 0
    existing: int = 0
    state: RunResult = RunResult.OK
    error: Optional[str] = None


@dataclass
class SyncReport:
    sources: list[SourceSyncReport] = field(default_factory=list)
    halted: bool = False

    @property
    def processed(self) -> int:
        return sum(1 for s in self.sources if s.state == RunResult.OK)

    @property
    def failed(self) -> int:
        return sum(1 for s in self.sources if s.state == RunResult.FAILED)

    @property
    def inserted(self) -> int:
        return sum(s.inserted for s in self.sources)

    @property
    def status(self) -> RunResult:
        return RunResult.QUOTA_EXHAUSTED if self.halted else RunResult.OK


# ------------------------------------------------------------------
# Classification
# ------------------------------------------------------------------


@dataclass
class ClassifyReport:
    analysis_type: str
    pending: int = 0
    batches: int = 0
    processed: int = 0
    failed: int = 0
    categories_written: int = 0
    halted: bool = False

    @property
    def status(self) -> RunResult:
        return RunResult.QUOTA_EXHAUSTED if self.halted else RunResult.OK


# ------------------------------------------------------------------
# Synthesis
# ------------------------------------------------------------------


@dataclass
class SynthesizedPlaylist:
    name: str
    description: str
    members: int
    created: bool


@dataclass
class SynthesisReport:
    classified_items: int = 0
    playlists: list[SynthesizedPlaylist] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(1 for p in self.playlists if p.created)

    @property
    def updated(self) -> int:
        return sum(1 for p in self.playlists if not p.created)

    @property
    def empty(self) -> int:
        return sum(1 for p in self.playlists if p.members == 0)

    @property
    def memberships(self) -> int:
        return sum(p.members for p in self.playlists)

    @property
    def status(self) -> RunResult:
        return RunResult.OK


# ------------------------------------------------------------------
# Publishing
# ------------------------------------------------------------------


@dataclass
class PlaylistPublishReport:
    playlist_id: str
    name: str
    remote_id: Optional[str] = None
    resumed: bool = False
    added: int = 0
    failed: int = 0
    complete: bool = False
    error: Optional[str] = None


@dataclass
class PublishReport:
    playlists: list[PlaylistPublishReport] = field(default_factory=list)
    skipped_empty: int = 0
    already_published: int = 0
    halted: bool = False

    @property
    def created(self) -> int:
        return sum(1 for p in self.playlists if not p.resumed and p.remote_id)

    @property
    def resumed(self) -> int:
        return sum(1 for p in self.playlists if p.resumed)

    @property
    def added(self) -> int:
        return sum(p.added for p in self.playlists)

    @property
    def failed(self) -> int:
        return sum(p.failed for p in self.playlists)

    @property
    def status(self) -> RunResult:
        return RunResult.QUOTA_EXHAUSTED if self.halted else RunResult.OK


# ------------------------------------------------------------------
# Whole run
# ------------------------------------------------------------------


@dataclass
class RunMetadata:
    run_id: str
    command: str
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    @property
    def runtime_seconds(self) -> float:
        end = self.finished_at or time.time()
        return round(end - self.started_at, 2)
