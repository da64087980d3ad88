from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from djemini import config
from djemini.errors import DjeminiError

# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(DjeminiError):
    pass


def _require(name: str) -> str:
    v = os.environ.get(name)
    if not v:
        raise ConfigError(f"Missing required environment variable: {name}")
    return v


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _as_float(v: str, default: float) -> float:
    try:
        return float(v)
    except Exception:
        return default


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    if len(secret) <= 8:
        return "****"
    return f"{secret[:4]}…{secret[-4:]}"


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    verbose: bool
    quiet: bool
    interactive: bool


def get_logging_env() -> LoggingEnvironment:
    log_level = os.environ.get("LOG_LEVEL", config.DEFAULT_LOG_LEVEL)
    log_retention = _as_int(
        os.environ.get("LOG_RETENTION", str(config.DEFAULT_LOG_RETENTION)),
        config.DEFAULT_LOG_RETENTION,
    )

    verbose = _as_bool(os.environ.get("DJEMINI_VERBOSE", "0"))
    quiet = _as_bool(os.environ.get("DJEMINI_QUIET", "0"))

    interactive = not quiet and sys.stdin.isatty() and sys.stdout.isatty()

    return LoggingEnvironment(
        log_level=log_level,
        log_retention=log_retention,
        verbose=verbose,
        quiet=quiet,
        interactive=interactive,
    )


# ------------------------------------------------------------
# Full runtime environment (PIPELINE ONLY)
# ------------------------------------------------------------


class Environment:
    def __init__(self):
        # Logging snapshot (immutable)
        self._logging = get_logging_env()

        # ---- AI SERVICE ----
        self._ai_api_key = os.environ.get("GEMINI_API_KEY", "")
        self.ai_model = os.environ.get("DJEMINI_AI_MODEL", config.DEFAULT_AI_MODEL)
        self.ai_base_url = os.environ.get(
            "DJEMINI_AI_BASE_URL", config.DEFAULT_AI_BASE_URL
        )
        self.ai_max_retries = _as_int(
            os.environ.get("DJEMINI_AI_MAX_RETRIES", str(config.DEFAULT_AI_MAX_RETRIES)),
            config.DEFAULT_AI_MAX_RETRIES,
        )

        # ---- YOUTUBE API ----
        self.sleep_sec = _as_float(
            os.environ.get("YT_SLEEP_SEC", str(config.DEFAULT_SLEEP_BETWEEN_CALLS_SEC)),
            config.DEFAULT_SLEEP_BETWEEN_CALLS_SEC,
        )
        self.max_retries = _as_int(
            os.environ.get("YT_MAX_RETRIES", str(config.DEFAULT_MAX_RETRIES)),
            config.DEFAULT_MAX_RETRIES,
        )
        self.backoff_base_sec = _as_float(
            os.environ.get("YT_BACKOFF_BASE_SEC", str(config.DEFAULT_BACKOFF_BASE_SEC)),
            config.DEFAULT_BACKOFF_BASE_SEC,
        )

        # ---- PIPELINE TUNABLES ----
        batch_size = _as_int(
            os.environ.get("DJEMINI_BATCH_SIZE", str(config.DEFAULT_BATCH_SIZE)),
            config.DEFAULT_BATCH_SIZE,
        )
        self.batch_size = max(1, min(batch_size, config.MAX_BATCH_SIZE))
        self.batch_delay_sec = _as_float(
            os.environ.get("DJEMINI_BATCH_DELAY_SEC", str(config.DEFAULT_BATCH_DELAY_SEC)),
            config.DEFAULT_BATCH_DELAY_SEC,
        )
        self.publish_delay_sec = _as_float(
            os.environ.get(
                "DJEMINI_PUBLISH_DELAY_SEC", str(config.DEFAULT_PUBLISH_DELAY_SEC)
            ),
            config.DEFAULT_PUBLISH_DELAY_SEC,
        )

        privacy = os.environ.get("DJEMINI_PRIVACY", config.DEFAULT_PRIVACY_STATUS)
        privacy = privacy.strip().lower()
        if privacy not in config.PRIVACY_STATUSES:
            raise ConfigError(
                f"DJEMINI_PRIVACY must be one of {', '.join(config.PRIVACY_STATUSES)}"
            )
        self.privacy_status = privacy

        # ---- STORAGE ----
        db_override = os.environ.get("DJEMINI_DB_PATH", "")
        self.db_path: Optional[Path] = (
            Path(db_override).expanduser() if db_override else None
        )

        # ---- RUN CONTEXT ----
        self.command = os.environ.get("DJEMINI_COMMAND", "bootstrap")
        self.run_id = os.environ.get("DJEMINI_RUN_ID", "")

    def require_ai_key(self) -> str:
        if not self._ai_api_key:
            _require("GEMINI_API_KEY")
        return self._ai_api_key

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self.log_level,
                "log_retention": self.log_retention,
                "verbose": self.verbose,
                "quiet": self.quiet,
            },
            "Run": {
                "command": self.command,
                "run_id": self.run_id,
                "db_path": str(self.db_path) if self.db_path else "(default)",
            },
            "AI": {
                "api_key": _mask(self._ai_api_key),
                "model": self.ai_model,
                "base_url": self.ai_base_url,
                "max_retries": self.ai_max_retries,
                "batch_size": self.batch_size,
                "batch_delay_sec": self.batch_delay_sec,
            },
            "YouTube": {
                "sleep_sec": self.sleep_sec,
                "max_retries": self.max_retries,
                "backoff_base_sec": self.backoff_base_sec,
                "publish_delay_sec": self.publish_delay_sec,
                "privacy_status": self.privacy_status,
            },
        }

    # ---- logging passthrough ----
    @property
    def log_level(self) -> str:
        return self._logging.log_level

    @property
    def log_retention(self) -> int:
        return self._logging.log_retention

    @property
    def verbose(self) -> bool:
        return self._logging.verbose

    @property
    def quiet(self) -> bool:
        return self._logging.quiet

    @property
    def interactive(self) -> bool:
        return self._logging.interactive


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment()
    return _ENV
