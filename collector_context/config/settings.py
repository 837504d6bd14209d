"""Collector and logging settings models."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CollectorSettings(BaseModel):
    """Behaviour of CollectorContext operations.

    Frozen: one instance is shared as the default by every context, on every
    thread. Replace ``context.settings`` to change a single context.
    """

    model_config = ConfigDict(frozen=True)

    strict: bool = Field(
        default=False,
        description="Raise on combine targets that are missing or hold plain values "
                    "instead of ignoring them"
    )
    allow_reload: bool = Field(
        default=True,
        description="Allow load_collectors() to run again before reset(). "
                    "Reloading re-runs every finalize() and overwrites earlier results."
    )


class LoggingSettings(BaseModel):
    """Structured logging configuration for collector runs."""
    level: str = Field(default="INFO", description="Minimum log level")
    json_log_dir: Optional[str] = Field(
        default=None,
        description="Directory for rotating JSON log files; console only when unset"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{v}'")
        return level


class CollectorContextConfig(BaseModel):
    """Top-level config with extras allowed so it can live in a larger YAML file."""

    model_config = ConfigDict(extra="allow")

    collectors: CollectorSettings = Field(default_factory=CollectorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
