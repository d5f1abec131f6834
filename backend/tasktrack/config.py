from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from tzlocal import get_localzone

DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "tasktrack"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TASKTRACK_", case_sensitive=False,
                                      extra="ignore")
    """Application runtime configuration."""

    app_name: str = "TaskTrack"
    data_dir: Path = DEFAULT_DATA_DIR
    tasks_file: str = "tasks.json"
    notes_file: str = "notes.json"
    timezone: Optional[str] = None

    log_dir: Path = DEFAULT_DATA_DIR / "logs"
    log_level: str = "INFO"

    @field_validator("timezone", mode="before")
    @classmethod
    def _check_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not str(value).strip():
            return None
        try:
            ZoneInfo(str(value).strip())
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return str(value).strip()

    @computed_field
    def tasks_path(self) -> Path:
        return self.data_dir / self.tasks_file

    @computed_field
    def notes_path(self) -> Path:
        return self.data_dir / self.notes_file

    def tzinfo(self) -> dt.tzinfo:
        """Configured zone, or the system's IANA zone when unset."""
        if not self.timezone:
            return get_localzone()
        return ZoneInfo(self.timezone)


settings = Settings()
