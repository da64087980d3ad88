from __future__ import annotations

import argparse

from djemini.cli.common import (
    add_help_subcommand,
    ask_selection,
    dispatch_subparser_help,
    finish,
    out,
    output_flags,
    parse_selection,
    print_table,
)
from djemini.errors import DjeminiError
from djemini.logger import get_logger
from djemini.pipeline.run_state import RunResult
from djemini.runner import connect_catalog, open_store
from djemini.stages.sources import SourceCatalog


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_sources_parser(subparsers: argparse._SubParsersAction) -> None:
    sources = subparsers.add_parser("sources", help="Manage tracked collections")
    sub = sources.add_subparsers(dest="sources_cmd", required=True)
    flags = output_flags()

    add_help_subcommand(sub, sources, "sources")

    list_p = sub.add_parser("list", parents=[flags], help="List tracked sources")
    list_p.set_defaults(action="list")

    disc = sub.add_parser(
        "discover", parents=[flags], help="List your YouTube playlists and pick some to track"
    )
    pick = disc.add_mutually_exclusive_group()
    pick.add_argument("--all", action="store_true", help="Track every playlist found")
    pick.add_argument("--select", metavar="1,3-5", help="Track these (1-based) entries")
    disc.set_defaults(action="discover")

    add_p = sub.add_parser(
        "add", parents=[flags], help='Track a playlist URL/id, or "liked" for liked music'
    )
    add_p.add_argument("ref", help='Playlist URL, playlist id, or "liked"')
    add_p.set_defaults(action="add")

    rm_p = sub.add_parser("remove", parents=[flags], help="Stop tracking a source")
    rm_p.add_argument("id", type=int, help="Source id (see sources list)")
    rm_p.set_defaults(action="remove")


# ------------------------------------------------------------
# Handlers
# ------------------------------------------------------------


def handle_sources(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    log = get_logger("djemini.sources")

    with open_store() as store:
        if args.action == "list":
            _print_sources(SourceCatalog(store))
            return 0

        if args.action == "remove":
            removed = SourceCatalog(store).remove(args.id)
            out(f"Removed [{removed.id}] {removed.name}")
            return finish(log, RunResult.OK)

        if args.action == "add":
            catalog = SourceCatalog(store, _optional_catalog(log, args.ref))
            source, created = catalog.add_by_url(args.ref)
            verb = "Added" if created else "Already tracking"
            out(f"{verb} [{source.id}] {source.name}")
            return finish(log, RunResult.OK)

        if args.action == "discover":
            return _discover(args, SourceCatalog(store, connect_catalog()), log)

    raise RuntimeError(f"Unknown sources action: {args.action}")


def _optional_catalog(log, ref: str):
    """A catalog for the playlist title lookup; adding still works signed out."""
    if ref.strip().lower() == "liked":
        return None
    try:
        return connect_catalog()
    except DjeminiError as e:
        log.warning("YouTube unavailable, using a placeholder name: %s", e)
        return None


def _print_sources(catalog: SourceCatalog) -> None:
    rows = [
        [
            s.id,
            s.kind,
            s.name,
            s.remote_id or "-",
            s.item_count,
            s.last_synced or "never",
        ]
        for s in catalog.list()
    ]
    print_table(["ID", "Kind", "Name", "Remote ID", "Items", "Last synced"], rows)


def _discover(args: argparse.Namespace, catalog: SourceCatalog, log) -> int:
    candidates = catalog.discover()
    print_table(
        ["#", "Title", "Items", "Tracked"],
        [
            [i, c.title, c.item_count, "yes" if c.already_tracked else ""]
            for i, c in enumerate(candidates, start=1)
        ],
        title="Your playlists",
    )

    if not candidates:
        return finish(log, RunResult.OK)

    if args.all:
        picked = list(range(len(candidates)))
    elif args.select:
        picked = parse_selection(args.select, len(candidates))
    else:
        picked = ask_selection(len(candidates))

    if not picked:
        out("Nothing selected")
        return finish(log, RunResult.OK)

    result = catalog.add([candidates[i] for i in picked])
    return finish(
        log,
        RunResult.OK,
        f"Added {len(result.added)} source(s), skipped {len(result.skipped)} already tracked",
    )
