"""Run settings, validated with pydantic and read from the environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

ENV_PREFIX = "MANIFESTDOC_"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    sources: list[Path] = Field(default_factory=list)
    output: Optional[Path] = None  # None writes to stdout
    title: str = Field(default="Reference", min_length=1, max_length=200)
    strict: bool = False
    log_level: LogLevel = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides) -> Settings:
        """Build settings from MANIFESTDOC_* variables; keyword overrides win.

        Raises:
            ConfigError: If a value fails validation.
        """
        env = os.environ if environ is None else environ
        data: dict = {}
        if env.get(f"{ENV_PREFIX}SOURCES"):
            data["sources"] = [p for p in env[f"{ENV_PREFIX}SOURCES"].split(os.pathsep) if p]
        if env.get(f"{ENV_PREFIX}OUTPUT"):
            data["output"] = env[f"{ENV_PREFIX}OUTPUT"]
        if f"{ENV_PREFIX}TITLE" in env:
            data["title"] = env[f"{ENV_PREFIX}TITLE"]
        if env.get(f"{ENV_PREFIX}STRICT"):
            data["strict"] = env[f"{ENV_PREFIX}STRICT"]
        if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
            data["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
        data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors(include_context=False)
            )
            raise ConfigError(f"invalid settings: {problems}") from e
