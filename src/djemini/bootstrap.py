"""bootstrap.py

Process bootstrap for djemini.

Rules:
1) Only bootstrap mutates os.environ for shared run context.
2) Call bootstrap_base_env() once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Everything else treats environment variables as the source of truth.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from djemini.env import reset_env_caches
from djemini.env.paths import PROJECT_ROOT

_BOOTSTRAPPED = False


def _candidate_env_files() -> list[Path]:
    return [
        Path.cwd() / ".env",
        PROJECT_ROOT / ".env",
        PROJECT_ROOT / "config" / ".env",
    ]


def bootstrap_base_env(dotenv_path: Optional[Path] = None) -> Optional[Path]:
    """
    Load the first .env found without overriding variables already set.

    Returns the file that was loaded, if any.
    """
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return None

    loaded: Optional[Path] = None
    for path in [dotenv_path] if dotenv_path else _candidate_env_files():
        if path.exists():
            load_dotenv(path, override=False)
            loaded = path
            break

    os.environ.setdefault(
        "DJEMINI_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True
    return loaded


def bootstrap_run_context(
    *,
    command: str,
    verbose: bool | None = None,
    quiet: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging and the stages."""

    os.environ["DJEMINI_COMMAND"] = command

    if verbose is not None:
        os.environ["DJEMINI_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["DJEMINI_QUIET"] = "1" if quiet else "0"

    # Context changes must invalidate cached env views.
    reset_env_caches()
