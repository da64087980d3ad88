from __future__ import annotations

import argparse

from djemini import config
from djemini.cli.common import confirm, finish, out, output_flags, print_kv, print_table
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult
from djemini.runner import open_store


def build_library_parsers(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser(
        "status",
        parents=[output_flags()],
        help="Library counts and category breakdown",
    )

    reset = subparsers.add_parser(
        "reset",
        parents=[output_flags()],
        help="Drop songs, tags and playlists (tracked sources are kept)",
    )
    reset.add_argument("--yes", action="store_true", help="Skip the confirmation")


def handle_status(args: argparse.Namespace) -> int:
    with open_store() as store:
        total = store.count_items()
        classified = store.count_classified()
        playlists = store.list_playlists()

        print_kv(
            "Library",
            {
                "sources": len(store.list_sources()),
                "songs": total,
                "classified": classified,
                "unclassified": total - classified,
                "playlists": len(playlists),
                "published": sum(1 for p in playlists if p.is_published),
            },
        )

        for ctype in config.CATEGORY_TYPES:
            print_table(
                ["Value", "Songs"],
                store.category_breakdown(ctype),
                title=ctype.capitalize(),
            )
    return 0


def handle_reset(args: argparse.Namespace) -> int:
    log = get_logger("djemini.reset")

    if not confirm(
        "Delete all songs, tags and playlists? Tracked sources are kept.",
        assume_yes=args.yes,
    ):
        out("Aborted")
        return finish(log, RunResult.SKIPPED, "Reset aborted")

    with open_store() as store:
        store.reset_classification_state()
    return finish(log, RunResult.OK, "Library reset")
