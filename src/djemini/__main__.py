from __future__ import annotations

import argparse
import sys
from typing import Callable, Optional

from djemini.bootstrap import bootstrap_base_env, bootstrap_run_context
from djemini.errors import DjeminiError
from djemini.pipeline.run_state import EXIT_USAGE, exit_code_for_error, result_for_error


def _dispatch_help(argv: list[str]) -> int:
    # Support:
    #   djemini help
    #   djemini help sources
    #   djemini help sources add
    if argv and argv[0] == "help":
        argv = argv[1:]

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0

    try:
        parser.parse_args(argv + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="djemini",
        description="Organize your YouTube music library into AI-suggested playlists.",
    )

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from djemini.cli.cli_auth import build_auth_parser
    from djemini.cli.cli_classify import build_classify_parser
    from djemini.cli.cli_env import build_env_parser
    from djemini.cli.cli_library import build_library_parsers
    from djemini.cli.cli_playlists import build_playlists_parser
    from djemini.cli.cli_publish import build_publish_parser
    from djemini.cli.cli_run import build_run_parser
    from djemini.cli.cli_sources import build_sources_parser
    from djemini.cli.cli_sync import build_sync_parser
    from djemini.cli.cli_synthesize import build_synthesize_parser

    build_auth_parser(sub)
    build_env_parser(sub)
    build_sources_parser(sub)
    build_sync_parser(sub)
    build_classify_parser(sub)
    build_synthesize_parser(sub)
    build_publish_parser(sub)
    build_playlists_parser(sub)
    build_library_parsers(sub)
    build_run_parser(sub)

    return p


def _handler(command: str) -> Callable[[argparse.Namespace], int]:
    if command == "auth":
        from djemini.cli.cli_auth import handle_auth

        return handle_auth

    if command == "env":
        from djemini.cli.cli_env import handle_env

        return handle_env

    if command == "sources":
        from djemini.cli.cli_sources import handle_sources

        return handle_sources

    if command == "sync":
        from djemini.cli.cli_sync import handle_sync

        return handle_sync

    if command == "classify":
        from djemini.cli.cli_classify import handle_classify

        return handle_classify

    if command == "synthesize":
        from djemini.cli.cli_synthesize import handle_synthesize

        return handle_synthesize

    if command == "publish":
        from djemini.cli.cli_publish import handle_publish

        return handle_publish

    if command == "playlists":
        from djemini.cli.cli_playlists import handle_playlists

        return handle_playlists

    if command == "status":
        from djemini.cli.cli_library import handle_status

        return handle_status

    if command == "reset":
        from djemini.cli.cli_library import handle_reset

        return handle_reset

    if command == "run":
        from djemini.cli.cli_run import handle_run

        return handle_run

    raise RuntimeError(f"Unknown command: {command}")


def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # Load .env and base environment early
    bootstrap_base_env()

    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "_help", False):
        return _dispatch_help(argv)

    # Stamp run context before logging reads it
    bootstrap_run_context(
        command=args.command,
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "quiet", False)),
    )

    from djemini.logger import get_logger, init_logging

    init_logging()

    log = get_logger("djemini")
    log.debug("djemini starting: command=%s", args.command)

    try:
        return _handler(args.command)(args)
    except ValueError as e:
        log.error("%s", e)
        log.info("RUN_STATUS=failed")
        return EXIT_USAGE
    except DjeminiError as e:
        log.error("%s", e)
        log.info(f"RUN_STATUS={result_for_error(e).value}")
        return exit_code_for_error(e)
    except KeyboardInterrupt:
        log.warning("Interrupted")
        log.info("RUN_STATUS=failed")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
