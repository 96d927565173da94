# src/tasktango/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (the suggestion endpoint needs none anyway).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTANGO"

DEFAULT_SUGGESTION_ENDPOINT = "http://localhost:5000/llama"
DEFAULT_SUGGESTION_MAX_TOKENS = 100
DEFAULT_SUGGESTION_PROMPT_PREFIX = "Categorize these tasks: "


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Suggestions ----
    suggestion_endpoint: str
    suggestion_max_tokens: int
    suggestion_prompt_prefix: str
    suggestions_offline: bool

    # ---- Task list ----
    sample_tasks: bool
    sample_task_count: int

    # ---- Support chat ----
    chat_reply_delay_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasktango").strip() or "tasktango"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasktango"))

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        suggestion_endpoint = (
            _env(_k("SUGGESTION_ENDPOINT"), DEFAULT_SUGGESTION_ENDPOINT).strip()
            or DEFAULT_SUGGESTION_ENDPOINT
        )
        suggestion_max_tokens = _env_int(_k("SUGGESTION_MAX_TOKENS"), DEFAULT_SUGGESTION_MAX_TOKENS)
        if suggestion_max_tokens <= 0:
            suggestion_max_tokens = DEFAULT_SUGGESTION_MAX_TOKENS
        suggestion_prompt_prefix = _env(_k("SUGGESTION_PROMPT_PREFIX"), DEFAULT_SUGGESTION_PROMPT_PREFIX)
        suggestions_offline = _env_bool(_k("SUGGESTIONS_OFFLINE"), False)

        sample_tasks = _env_bool(_k("SAMPLE_TASKS"), True)
        sample_task_count = max(0, _env_int(_k("SAMPLE_TASK_COUNT"), 10))

        chat_reply_delay_seconds = max(0.0, _env_float(_k("CHAT_REPLY_DELAY_SECONDS"), 1.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            console_enabled=console_enabled,
            suggestion_endpoint=suggestion_endpoint,
            suggestion_max_tokens=suggestion_max_tokens,
            suggestion_prompt_prefix=suggestion_prompt_prefix,
            suggestions_offline=suggestions_offline,
            sample_tasks=sample_tasks,
            sample_task_count=sample_task_count,
            chat_reply_delay_seconds=chat_reply_delay_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load settings once (reads .env on first call) and return the cached object."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
