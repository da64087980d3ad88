from __future__ import annotations

import argparse

from djemini import config
from djemini.ai import build_ai_service
from djemini.cli.common import finish, output_flags
from djemini.env import get_env
from djemini.logger import get_logger
from djemini.runner import open_store
from djemini.stages import Classifier


def build_classify_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "classify",
        parents=[output_flags()],
        help="Tag unclassified songs with mood / genre / energy",
    )
    p.add_argument(
        "--type",
        dest="analysis_type",
        choices=config.ANALYSIS_TYPES,
        default="all",
        help="Category type to request (default: all)",
    )


def handle_classify(args: argparse.Namespace) -> int:
    log = get_logger("djemini.classify")
    env = get_env()
    ai = build_ai_service(env)

    with open_store(env) as store:
        report = Classifier(
            store,
            ai,
            batch_size=env.batch_size,
            batch_delay_sec=env.batch_delay_sec,
        ).classify(args.analysis_type)

    if report.pending == 0:
        return finish(log, report.status, "Nothing to classify")

    return finish(
        log,
        report.status,
        f"Classified {report.processed}/{report.pending} song(s) in {report.batches} "
        f"batch(es), {report.failed} failed, {report.categories_written} tag(s) written",
    )
