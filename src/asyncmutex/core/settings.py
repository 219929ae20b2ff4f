"""Settings loader for lock behaviour and logging."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from asyncmutex.utils.env import get_bool_env, get_str_env
from asyncmutex.utils.logging import reconfigure


class LockSettings(BaseModel):
    strict: bool = False
    log_level: str = "WARNING"
    rich_logging: bool = True

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        name = value.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {value}")
        return name

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_file(cls, path: Path) -> "LockSettings":
        data = yaml.safe_load(path.read_text()) or {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc

    @classmethod
    def from_env(cls, prefix: str = "ASYNCMUTEX_") -> "LockSettings":
        data = {
            "strict": get_bool_env(f"{prefix}STRICT", default=False),
            "log_level": get_str_env(f"{prefix}LOG_LEVEL", default="WARNING"),
            "rich_logging": get_bool_env(f"{prefix}RICH_LOGGING", default=True),
        }
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid lock settings: {exc}") from exc

    def configure_logging(self) -> None:
        """Apply level and handler choice to the package loggers."""
        reconfigure(self.level, rich=self.rich_logging)
