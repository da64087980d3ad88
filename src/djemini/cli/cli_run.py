from __future__ import annotations

import argparse

from djemini import config
from djemini.ai import build_ai_service
from djemini.branding import SYMBOLS
from djemini.cli.common import finish, output_flags, print_table
from djemini.env import get_env
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult
from djemini.runner import build_pipeline, connect_catalog, open_store, run_pipeline


def build_run_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "run",
        parents=[output_flags()],
        help="sync -> classify -> synthesize -> publish",
    )
    p.add_argument(
        "--type",
        dest="analysis_type",
        choices=config.ANALYSIS_TYPES,
        default="all",
        help="Category type for the classify stage (default: all)",
    )


_STATE_SYMBOL = {
    RunResult.OK: SYMBOLS.OK,
    RunResult.SKIPPED: SYMBOLS.SKIPPED,
    RunResult.QUOTA_EXHAUSTED: SYMBOLS.WARN,
    RunResult.AUTH_INVALID: SYMBOLS.FAIL,
    RunResult.FAILED: SYMBOLS.FAIL,
}


def handle_run(args: argparse.Namespace) -> int:
    log = get_logger("djemini.run")
    env = get_env()

    # Fail on a missing key or token before any stage runs
    ai = build_ai_service(env)
    catalog = connect_catalog(env)

    with open_store(env) as store:
        outcome = run_pipeline(
            build_pipeline(store, catalog, ai, env),
            analysis_type=args.analysis_type,
            run_id=env.run_id,
        )

    print_table(
        ["Stage", "State", "Note"],
        [
            [s.name, f"{_STATE_SYMBOL[s.state]} {s.state.value}", s.reason or ""]
            for s in outcome.stages
        ],
        title="Run",
    )
    return finish(
        log,
        outcome.overall,
        f"Run finished in {outcome.runtime_seconds}s",
    )
