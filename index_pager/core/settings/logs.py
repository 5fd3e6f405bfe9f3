"""Logging settings.

Environment variables use LOG_ prefix.
Example: LOG_LEVEL=DEBUG, LOG_JSON=true, LOG_FILE_ENABLED=true
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Where log records go and how they look.

    Page fetches are logged at DEBUG and traversal failures at WARNING, so
    the default level keeps a traversal quiet unless something breaks.
    """

    service_name: str = Field(
        default="index-pager",
        description="Static 'service' field of JSON records",
    )
    level: LogLevel = Field(default="WARNING", description="Root logger level")
    json_logs: bool = Field(
        default=False,
        validation_alias=AliasChoices("json_logs", "log_json"),
        description="Emit JSON Lines instead of plain text",
    )

    console_enabled: bool = Field(default=True, description="Log to stderr")
    console_level: LogLevel | None = Field(
        default=None,
        description="stderr handler level (root level if unset)",
    )

    file_enabled: bool = Field(default=False, description="Log to a rotating file")
    file_path: Path = Field(
        default=Path("logs/index-pager.log.jsonl"),
        description="Log file, used only when file_enabled is set",
    )
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Rotate after this size")
    file_backup_count: int = Field(default=5, ge=0, le=100, description="Rotated files to keep")

    capture_warnings: bool = Field(
        default=True,
        description="Route the warnings module through logging",
    )
    logger_levels: dict[str, LogLevel] = Field(
        default_factory=lambda: {"sqlalchemy.engine": "WARNING", "aiosqlite": "WARNING"},
        description="Per-logger level overrides, e.g. to quiet a chatty driver",
    )

    @field_validator("level", "console_level", mode="before")
    @classmethod
    def _upper(cls, v: str | None) -> str | None:
        return v.upper() if isinstance(v, str) else v

    @computed_field
    @property
    def effective_console_level(self) -> LogLevel:
        return self.console_level or self.level

    @computed_field
    @property
    def effective_file_path(self) -> Path | None:
        return self.file_path if self.file_enabled else None

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )
