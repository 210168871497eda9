"""Pydantic configuration model for taemno-os."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taemno_os.constants import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_ENV_PREFIX,
    DEFAULT_ENV_SUFFIX,
    DEFAULT_LOG_LEVEL,
)


class TaemnoConfig(BaseModel):
    """Runtime settings.  Every field has a working default."""

    model_config = ConfigDict(extra="forbid")

    env_prefix: str = Field(
        default=DEFAULT_ENV_PREFIX,
        min_length=1,
        description="Literal text opening a secret reference.",
    )
    env_suffix: str = Field(
        default=DEFAULT_ENV_SUFFIX,
        min_length=1,
        description="Literal text closing a secret reference.",
    )
    provider: Literal["auto", "keychain", "keyring"] = Field(
        default="auto",
        description="Secret backend: 'auto' picks one for the running platform.",
    )
    command_timeout: float = Field(
        default=DEFAULT_COMMAND_TIMEOUT,
        gt=0,
        description="Timeout in seconds for each keychain subprocess call.",
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level '{v}'")
        return level
