"""
djemini CLI package.

argparse-based subcommands. Each module exposes:
- build_*_parser(subparsers)
- handle_*(args) -> int

No side effects at package import time.
"""
from __future__ import annotations

__all__ = [
    "cli_auth",
    "cli_classify",
    "cli_env",
    "cli_library",
    "cli_playlists",
    "cli_publish",
    "cli_run",
    "cli_sources",
    "cli_sync",
    "cli_synthesize",
]
