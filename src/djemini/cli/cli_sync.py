from __future__ import annotations

import argparse

from djemini.cli.common import finish, output_flags, print_table
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult, SyncReport
from djemini.runner import connect_catalog, open_store
from djemini.stages import Ingestor


def build_sync_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "sync",
        parents=[output_flags()],
        help="Fetch songs from tracked sources into the library",
    )
    p.add_argument("--source", type=int, metavar="ID", help="Only sync this source")


def handle_sync(args: argparse.Namespace) -> int:
    log = get_logger("djemini.sync")

    with open_store() as store:
        ingestor = Ingestor(store, connect_catalog())

        if args.source is not None:
            report = SyncReport(sources=[ingestor.sync(args.source)])
        else:
            report = ingestor.sync_all()

    print_table(
        ["ID", "Source", "Fetched", "Non-music", "New", "Existing", "State"],
        [
            [s.source_id, s.name, s.fetched, s.filtered, s.inserted, s.existing, s.state.value]
            for s in report.sources
        ],
        title="Sync",
    )

    state = report.status
    if state == RunResult.OK and report.failed and not report.processed:
        state = RunResult.FAILED

    return finish(
        log,
        state,
        f"Synced {report.processed} source(s), {report.failed} failed, "
        f"{report.inserted} new song(s)",
    )
