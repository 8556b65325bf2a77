"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``HisaabConfig``
instance.  Existing dict-based access continues to work unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class PathsConfig(BaseModel):
    """File-system paths used by the application."""

    data_dir: Path
    ledger_file: Path | None = None
    log_dir: Path | None = None

    @field_validator("data_dir", "ledger_file", "log_dir", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v


class LoggingConfig(BaseModel):
    """Loguru sink settings."""

    level: str = "WARNING"
    file: str | None = None
    to_file: bool = False

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {v!r}; expected one of {sorted(_LOG_LEVELS)}")
        return level


class PricesConfig(BaseModel):
    """Quote refresh throttling."""

    refresh_delay_seconds: float = 1.0

    @field_validator("refresh_delay_seconds")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("refresh_delay_seconds must be >= 0")
        return v


class CurrencyConfig(BaseModel):
    """Currency used when a record does not name one."""

    default: str = "USD"


class HisaabConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    paths: PathsConfig = PathsConfig(data_dir=Path("~/.hisaab-data"))
    logging: LoggingConfig = LoggingConfig()
    prices: PricesConfig = PricesConfig()
    currency: CurrencyConfig = CurrencyConfig()
