from __future__ import annotations

import argparse

from djemini import config
from djemini.cli.common import finish, output_flags, print_table
from djemini.env import get_env
from djemini.logger import get_logger
from djemini.runner import connect_catalog, open_store
from djemini.stages import Publisher


def build_publish_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "publish",
        parents=[output_flags()],
        help="Create unpublished playlists on YouTube and add their songs",
    )
    p.add_argument(
        "--privacy",
        choices=config.PRIVACY_STATUSES,
        help="Privacy for newly created playlists (default: DJEMINI_PRIVACY)",
    )


def handle_publish(args: argparse.Namespace) -> int:
    log = get_logger("djemini.publish")
    env = get_env()

    with open_store(env) as store:
        publisher = Publisher(
            store,
            connect_catalog(env),
            privacy=args.privacy or env.privacy_status,
            playlist_delay_sec=env.publish_delay_sec,
        )
        report = publisher.publish()

    print_table(
        ["Playlist", "Remote ID", "Added", "Failed", "Done", "Note"],
        [
            [
                p.name,
                p.remote_id or "-",
                p.added,
                p.failed,
                "yes" if p.complete else "no",
                p.error or ("resumed" if p.resumed else ""),
            ]
            for p in report.playlists
        ],
        title="Publish",
    )
    return finish(
        log,
        report.status,
        f"{report.created} created, {report.resumed} resumed, {report.added} song(s) added, "
        f"{report.failed} failed, {report.skipped_empty} empty skipped, "
        f"{report.already_published} already published",
    )
