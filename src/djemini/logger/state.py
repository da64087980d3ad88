from __future__ import annotations

from pathlib import Path
from typing import Optional

INITIALIZED: bool = False
RUN_ID: Optional[str] = None
LOG_DIR: Optional[Path] = None
LOG_FILE_PATH: Optional[Path] = None


def reset() -> None:
    global INITIALIZED, RUN_ID, LOG_DIR, LOG_FILE_PATH
    INITIALIZED = False
    RUN_ID = None
    LOG_DIR = None
    LOG_FILE_PATH = None
