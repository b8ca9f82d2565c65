"""Settings for connecting a bucket store.

Uses Pydantic for validation with frozen (immutable) models. Values come from
keyword arguments or, through `StoreSettings.from_env()`, the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_REDIS_URL = "redis://127.0.0.1/"

ENV_REDIS_URL = "REDIS_ADDR"
ENV_LOG_LEVEL = "SLANGBUCKET_LOG_LEVEL"
ENV_LOG_JSON = "SLANGBUCKET_LOG_JSON"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class StoreSettings(BaseModel):
    """Backend and logging settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        description="Redis connection URL",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="Minimum level of emitted log records",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, value: str) -> str:
        if not value.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError(f"redis_url must be a redis://, rediss:// or unix:// URL, got {value!r}")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.upper()
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StoreSettings:
        """Build settings from `environ` (defaults to `os.environ`).

        Unset variables fall back to the field defaults.
        """
        if environ is None:
            environ = os.environ

        values: dict[str, object] = {}
        if ENV_REDIS_URL in environ:
            values["redis_url"] = environ[ENV_REDIS_URL]
        if ENV_LOG_LEVEL in environ:
            values["log_level"] = environ[ENV_LOG_LEVEL]
        if ENV_LOG_JSON in environ:
            values["log_json"] = environ[ENV_LOG_JSON]
        return cls.model_validate(values)
