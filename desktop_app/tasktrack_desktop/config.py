"""Configuration helpers for the desktop application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_REFRESH_INTERVAL_MS = 1000


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class AppConfig:
    """Window and refresh settings of the desktop shell."""

    refresh_interval_ms: int = DEFAULT_REFRESH_INTERVAL_MS
    minimize_to_tray: bool = True


def load_config() -> AppConfig:
    """Load configuration from an optional `.env` file next to the package."""

    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return AppConfig(
        refresh_interval_ms=max(int(os.getenv("TASKTRACK_REFRESH_INTERVAL_MS", DEFAULT_REFRESH_INTERVAL_MS)), 100),
        minimize_to_tray=_env_flag("TASKTRACK_MINIMIZE_TO_TRAY", True),
    )


__all__ = ["AppConfig", "load_config"]
