from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from djemini.ai.service import AIService
from djemini.auth import AuthProvider, get_provider
from djemini.branding import DJEMINI_HEADER, DJEMINI_SECTION_END
from djemini.env import Environment, get_env
from djemini.env.paths import database_file
from djemini.errors import DjeminiError
from djemini.logger import get_logger
from djemini.pipeline.run_state import (
    RunMetadata,
    RunResult,
    exit_code_for,
    result_for_error,
)
from djemini.providers.base import CatalogProvider
from djemini.providers.youtube.api_manager import YouTubeApiManager
from djemini.providers.youtube.catalog import YouTubeCatalog
from djemini.stages import (
    Classifier,
    Ingestor,
    PlaylistSynthesizer,
    Publisher,
)
from djemini.store import Store

log = get_logger("djemini.runner")


@dataclass(frozen=True)
class StageResult:
    name: str
    state: RunResult
    exit_code: int
    reason: Optional[str] = None
    report: Any = None


@dataclass(frozen=True)
class RunOutcome:
    overall: RunResult
    stages: list[StageResult]
    runtime_seconds: float = 0.0


# ------------------------------------------------------------
# Wiring
# ------------------------------------------------------------


def open_store(env: Optional[Environment] = None) -> Store:
    env = env or get_env()
    path = env.db_path or database_file()
    log.debug("Opening library at %s", path)
    return Store(path)


def connect_catalog(
    env: Optional[Environment] = None,
    provider: Optional[AuthProvider] = None,
) -> YouTubeCatalog:
    """Authenticated YouTube catalog. Raises Unauthenticated without a token."""
    env = env or get_env()
    provider = provider or get_provider("youtube")
    api = YouTubeApiManager(
        max_retries=env.max_retries,
        backoff_base_sec=env.backoff_base_sec,
        sleep_sec=env.sleep_sec,
    )
    return YouTubeCatalog(provider.build_client(), api)


@dataclass
class Pipeline:
    ingestor: Ingestor
    classifier: Classifier
    synthesizer: PlaylistSynthesizer
    publisher: Publisher


def build_pipeline(
    store: Store,
    catalog: CatalogProvider,
    ai: AIService,
    env: Optional[Environment] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> Pipeline:
    env = env or get_env()
    return Pipeline(
        ingestor=Ingestor(store, catalog),
        classifier=Classifier(
            store,
            ai,
            batch_size=env.batch_size,
            batch_delay_sec=env.batch_delay_sec,
            sleep=sleep,
        ),
        synthesizer=PlaylistSynthesizer(store, ai),
        publisher=Publisher(
            store,
            catalog,
            privacy=env.privacy_status,
            playlist_delay_sec=env.publish_delay_sec,
            sleep=sleep,
        ),
    )


# ------------------------------------------------------------
# Core execution
# ------------------------------------------------------------


def _log_header(title: str) -> None:
    log.info(DJEMINI_HEADER(title).rstrip("\n"))


def _log_footer() -> None:
    log.info(DJEMINI_SECTION_END())


def _run_stage(index: int, total: int, name: str, fn: Callable[[], Any]) -> StageResult:
    _log_header(f"Stage {index}/{total}: {name}")

    try:
        report = fn()
    except DjeminiError as e:
        state = result_for_error(e)
        log.error("%s failed (%s): %s", name, state.value, e)
        result = StageResult(
            name=name, state=state, exit_code=exit_code_for(state), reason=str(e)
        )
    else:
        state = report.status
        result = StageResult(
            name=name, state=state, exit_code=exit_code_for(state), report=report
        )

    log.info("Stage %d END: %s (%s)", index, name, result.state.value)
    _log_footer()
    return result


def run_pipeline(
    pipeline: Pipeline,
    *,
    analysis_type: str = "all",
    run_id: str = "",
) -> RunOutcome:
    """
    sync -> classify -> synthesize -> publish.

    Each stage completes before the next starts; the first non-ok stage
    blocks the rest, which are reported as skipped.
    """
    meta = RunMetadata(run_id=run_id, command="run")

    stages: list[tuple[str, Callable[[], Any]]] = [
        ("Sync", pipeline.ingestor.sync_all),
        ("Classify", lambda: pipeline.classifier.classify(analysis_type)),
        ("Synthesize", pipeline.synthesizer.synthesize),
        ("Publish", pipeline.publisher.publish),
    ]

    results: list[StageResult] = []
    overall = RunResult.OK
    block_reason: Optional[str] = None

    for i, (name, fn) in enumerate(stages, start=1):
        if block_reason is not None:
            results.append(
                StageResult(
                    name=name,
                    state=RunResult.SKIPPED,
                    exit_code=-1,
                    reason=f"blocked_by_{block_reason}",
                )
            )
            continue

        r = _run_stage(i, len(stages), name, fn)
        results.append(r)

        if r.state != RunResult.OK:
            overall = r.state
            block_reason = r.state.value

    meta.finished_at = time.time()
    return RunOutcome(overall=overall, stages=results, runtime_seconds=meta.runtime_seconds)
