from __future__ import annotations

import argparse
import logging
from typing import Iterable, Optional, Sequence

from rich.prompt import Confirm, Prompt
from rich.table import Table

from djemini.env import get_logging_env
from djemini.logger.console import UI_CONSOLE
from djemini.pipeline.run_state import RunResult, exit_code_for


# ----------------------------
# Shared flags
# ----------------------------


def output_flags() -> argparse.ArgumentParser:
    """Parent parser carrying --verbose / --quiet for every subcommand."""
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("--verbose", action="store_true", help="Verbose console output")
    p.add_argument("--quiet", action="store_true", help="Suppress console output")
    return p


# ----------------------------
# Help dispatch (subparser-local)
# ----------------------------


def dispatch_subparser_help(
    parser: argparse.ArgumentParser, path: list[str] | None
) -> int:
    """
    Implements consistent `X help [subcmd ...]` behavior for a subtree parser.
    """
    if not path:
        parser.print_help()
        return 0

    try:
        parser.parse_args(path + ["--help"])
    except SystemExit:
        pass
    return 0


def add_help_subcommand(
    sub: argparse._SubParsersAction, owner: argparse.ArgumentParser, name: str
) -> None:
    help_p = sub.add_parser("help", help=f"Show help for {name}")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=owner)


# ----------------------------
# Run status
# ----------------------------


def finish(log: logging.Logger, state: RunResult, summary: str = "") -> int:
    """
    Emit the RUN_STATUS line every command ends with and map to an exit code.
    """
    if summary:
        if state == RunResult.OK:
            log.info(summary)
        else:
            log.warning(summary)
    log.info(f"RUN_STATUS={state.value}")
    return exit_code_for(state)


# ----------------------------
# CLI output helpers
# ----------------------------


def quiet() -> bool:
    return get_logging_env().quiet


def out(*objects, **kwargs) -> None:
    if not quiet():
        UI_CONSOLE.print(*objects, **kwargs)


def print_table(
    headers: Sequence[str],
    rows: Iterable[Sequence[object]],
    *,
    title: Optional[str] = None,
) -> None:
    rows = [list(r) for r in rows]
    if not rows:
        out("(no results)")
        return

    table = Table(title=title, header_style="bold cyan")
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*("" if c is None else str(c) for c in row))
    out(table)


def print_kv(title: str, values: dict) -> None:
    out(f"\n[bold cyan]{title}[/bold cyan]")
    for key, value in values.items():
        out(f"  {key:<20} = {value}")


# ----------------------------
# Interaction
# ----------------------------


def confirm(question: str, *, assume_yes: bool = False) -> bool:
    if assume_yes:
        return True
    if not get_logging_env().interactive:
        return False
    return Confirm.ask(question, console=UI_CONSOLE, default=False)


def parse_selection(raw: str, count: int) -> list[int]:
    """
    "1,3-5" -> [0, 2, 3, 4] (0-based). "all" selects everything.

    Raises ValueError on anything outside 1..count.
    """
    raw = (raw or "").strip().lower()
    if not raw:
        return []
    if raw == "all":
        return list(range(count))

    picked: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            lo, hi = (int(x) for x in part.split("-", 1))
            nums = range(lo, hi + 1)
        else:
            nums = [int(part)]
        for n in nums:
            if n < 1 or n > count:
                raise ValueError(f"selection {n} is out of range 1-{count}")
            if n - 1 not in picked:
                picked.append(n - 1)
    return picked


def ask_selection(count: int) -> list[int]:
    if not get_logging_env().interactive:
        return []
    raw = Prompt.ask(
        "Select playlists to track (e.g. 1,3-5 or all; empty to cancel)",
        console=UI_CONSOLE,
        default="",
    )
    return parse_selection(raw, count)
