from __future__ import annotations

import argparse

from djemini.ai import build_ai_service
from djemini.cli.common import finish, output_flags, print_table
from djemini.env import get_env
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult
from djemini.runner import open_store
from djemini.stages import PlaylistSynthesizer


def build_synthesize_parser(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser(
        "synthesize",
        parents=[output_flags()],
        help="Ask the AI for playlist ideas and fill them from the library",
    )


def handle_synthesize(args: argparse.Namespace) -> int:
    log = get_logger("djemini.synthesize")
    env = get_env()

    with open_store(env) as store:
        if store.count_classified() == 0:
            return finish(log, RunResult.OK, "No classified songs yet")
        report = PlaylistSynthesizer(store, build_ai_service(env)).synthesize()

    print_table(
        ["Playlist", "Songs", "New", "Description"],
        [
            [p.name, p.members, "yes" if p.created else "", p.description]
            for p in report.playlists
        ],
        title="Playlists",
    )
    return finish(
        log,
        report.status,
        f"{report.created} created, {report.updated} updated, "
        f"{report.empty} empty, {report.memberships} membership(s)",
    )
