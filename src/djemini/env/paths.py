from __future__ import annotations

import os
from pathlib import Path

from djemini import config

# ---------------------------------------------------------------------
# Project root
# ---------------------------------------------------------------------

# This file lives in src/djemini/env/, so project root is three levels up
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent


# ---------------------------------------------------------------------
# Base directories (override-friendly)
# ---------------------------------------------------------------------


def _resolve_dir(env_var: str, default: Path) -> Path:
    """
    Resolve a directory path from an environment variable or default.
    Ensures the directory exists.
    """
    raw = os.environ.get(env_var)
    path = Path(raw).expanduser().resolve() if raw else default
    path.mkdir(parents=True, exist_ok=True)
    return path


# ---------------------------------------------------------------------
# Public paths
# ---------------------------------------------------------------------

# Logs
LOGS_DIR = _resolve_dir(
    "DJEMINI_LOGS_DIR",
    PROJECT_ROOT / "logs",
)

# Auth (OAuth tokens, client secrets)
AUTH_DIR = _resolve_dir(
    "DJEMINI_AUTH_DIR",
    PROJECT_ROOT / "auth",
)

# Data (SQLite library)
DATA_DIR = _resolve_dir(
    "DJEMINI_DATA_DIR",
    PROJECT_ROOT / "data",
)


# ---------------------------------------------------------------------
# Utility / internal paths
# ---------------------------------------------------------------------


def auth_token_file(filename: str = config.OAUTH_TOKEN_FILENAME) -> Path:
    """
    Path to an auth token file inside AUTH_DIR.
    """
    return AUTH_DIR / filename


def auth_client_secrets_file(filename: str = config.CLIENT_SECRETS_FILENAME) -> Path:
    """
    Path to an OAuth client secrets file inside AUTH_DIR.
    """
    return AUTH_DIR / filename


def database_file(filename: str = config.DB_FILENAME) -> Path:
    """
    Path to the SQLite library inside DATA_DIR.
    """
    return DATA_DIR / filename


# ---------------------------------------------------------------------
# Log layout helpers (used by logger)
# ---------------------------------------------------------------------


def command_logs_dir(command: str) -> Path:
    """
    Base log directory for a CLI command (e.g. sync, publish).
    """
    path = LOGS_DIR / command
    path.mkdir(parents=True, exist_ok=True)
    return path
