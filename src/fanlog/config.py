"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting `FANLOG_*` environment variables into a validated Pydantic model.
- Providing actionable error messages for malformed values.
"""

from __future__ import annotations

import os
from typing import Literal

import dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from .levels import NAMED_TABLES

LevelsName = Literal["npm", "syslog", "cli"]


def _get_env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _get_env_bool(name: str) -> bool | None:
    """Read an optional boolean env var; unset/empty stays None."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a float. Got: {raw!r}") from exc


class LoggerConfig(BaseModel):
    """Settings for a `Logger` instance."""

    level: str = Field(default="info", description="Default threshold for transports without their own level")
    levels: LevelsName = Field(default="npm", description="Named severity table")

    # Tri-state: None means "use the default" (True); an explicit False is honored.
    emit_errors: bool | None = Field(default=None, description="Emit 'error' events for transport failures")

    profiler_ttl_s: float | None = Field(default=None, description="Evict unmatched profiler entries older than this")

    @property
    def effective_emit_errors(self) -> bool:
        return True if self.emit_errors is None else self.emit_errors

    @field_validator("profiler_ttl_s")
    def validate_profiler_ttl(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError(f"profiler_ttl_s must be > 0. Got: {v}")
        return v

    @model_validator(mode="after")
    def validate_level_in_table(self) -> LoggerConfig:
        if self.level not in NAMED_TABLES[self.levels]:
            raise ValueError(f"level {self.level!r} is not defined in the {self.levels!r} severity table")
        return self


def load_config() -> LoggerConfig:
    """Load logger configuration from `FANLOG_*` environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages for malformed values.
    """
    dotenv.load_dotenv()

    return LoggerConfig(
        level=_get_env_str("FANLOG_LEVEL", "info"),
        levels=_get_env_str("FANLOG_LEVELS", "npm"),  # type: ignore[arg-type]
        emit_errors=_get_env_bool("FANLOG_EMIT_ERRORS"),
        profiler_ttl_s=_get_env_float("FANLOG_PROFILER_TTL_S"),
    )
