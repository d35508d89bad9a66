"""Settings model for the JSON mock server."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class MockApiSettings(BaseSettings):
    """Runtime settings loaded from ``MOCK_API_*`` environment variables."""

    directory: Path = Path("db")
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    interval: float = Field(default=30, gt=0)

    delete_policy: Literal["all", "first"] = "all"
    gate_scope: Literal["global", "collection"] = "global"
    busy_status_code: int = Field(default=400, ge=400, le=599)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="MOCK_API_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("delete_policy", "gate_scope", mode="before")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.lower() if isinstance(value, str) else value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, level: str) -> str:
        normalized = level.upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Invalid log level {level!r}")
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> MockApiSettings:
    """Returns a cached settings object."""

    return MockApiSettings()
