from __future__ import annotations

import argparse

from djemini import config
from djemini.cli.common import (
    add_help_subcommand,
    confirm,
    dispatch_subparser_help,
    finish,
    out,
    output_flags,
    print_table,
)
from djemini.errors import NotFound
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult
from djemini.runner import open_store
from djemini.store import Playlist, Store


def build_playlists_parser(subparsers: argparse._SubParsersAction) -> None:
    playlists = subparsers.add_parser("playlists", help="Inspect and manage local playlists")
    sub = playlists.add_subparsers(dest="playlists_cmd", required=True)
    flags = output_flags()

    add_help_subcommand(sub, playlists, "playlists")

    sub.add_parser("list", parents=[flags], help="List local playlists").set_defaults(
        action="list"
    )

    clear_p = sub.add_parser(
        "clear", parents=[flags], help="Delete every local playlist (remote ones are kept)"
    )
    clear_p.add_argument("--yes", action="store_true", help="Skip the confirmation")
    clear_p.set_defaults(action="clear")

    unpub = sub.add_parser(
        "unpublish",
        parents=[flags],
        help="Forget the remote playlist so the next publish creates a new one",
    )
    unpub.add_argument("name")
    unpub.set_defaults(action="unpublish")

    rm_p = sub.add_parser("remove", parents=[flags], help="Delete one local playlist")
    rm_p.add_argument("name")
    rm_p.set_defaults(action="remove")


def _require_playlist(store: Store, name: str) -> Playlist:
    playlist = store.find_playlist_by_name(name)
    if playlist is None:
        raise NotFound(f"No playlist named {name!r}")
    return playlist


def handle_playlists(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    log = get_logger("djemini.playlists")

    with open_store() as store:
        if args.action == "list":
            print_table(
                ["Name", "Songs", "Published", "Link"],
                [
                    [
                        p.name,
                        p.member_count,
                        p.published_at or ("partial" if p.remote_id else "no"),
                        config.PLAYLIST_URL_TEMPLATE.format(playlist_id=p.remote_id)
                        if p.remote_id
                        else "",
                    ]
                    for p in store.list_playlists()
                ],
                title="Playlists",
            )
            return 0

        if args.action == "clear":
            if not confirm("Delete all local playlists?", assume_yes=args.yes):
                out("Aborted")
                return finish(log, RunResult.SKIPPED, "Playlist clear aborted")
            removed = store.clear_playlists()
            return finish(log, RunResult.OK, f"Removed {removed} playlist(s)")

        playlist = _require_playlist(store, args.name)

        if args.action == "unpublish":
            store.clear_playlist_remote_id(playlist.id)
            return finish(
                log,
                RunResult.OK,
                f"{playlist.name} will be published as a new playlist next time",
            )

        if args.action == "remove":
            store.delete_playlist(playlist.id)
            return finish(log, RunResult.OK, f"Removed {playlist.name}")

    raise RuntimeError(f"Unknown playlists action: {args.action}")
