from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger(__name__)


def enforce_retention(log_dir: Path, keep: int) -> list[Path]:
    """
    Keep the newest `keep` *.log files in log_dir and delete the rest.

    Returns the removed paths. keep <= 0 disables pruning.
    """
    if keep <= 0:
        return []

    logs = sorted(
        log_dir.glob("*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    removed: list[Path] = []
    for old in logs[keep:]:
        try:
            old.unlink()
            removed.append(old)
        except OSError as e:
            log.debug("Could not remove old log %s: %s", old, e)
    return removed
