#!/usr/bin/env python3
"""
Runtime configuration for gitty, validated with Pydantic.

Configuration can be built directly, read from ``GITTY_*`` environment
variables, or loaded from a JSON file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Literal, Mapping, Optional, TypeAlias, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import GitConfigError

PathLike: TypeAlias = Union[str, Path]
LogLevel: TypeAlias = Literal[
    "TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"
]

# Untranslated output keeps the parsers working; no prompt may block a call.
DEFAULT_ENV: Dict[str, str] = {
    "LC_ALL": "C",
    "GIT_TERMINAL_PROMPT": "0",
}

ENV_PREFIX = "GITTY_"


class GitConfig(BaseModel):
    """How the git executable is located and invoked."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    executable: str = Field(default="git", min_length=1)
    timeout: Optional[float] = Field(default=60.0, gt=0)
    encoding: str = "utf-8"
    env: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ENV))
    disable_color: bool = True
    log_level: LogLevel = "INFO"

    @field_validator("env")
    @classmethod
    def merge_default_env(cls, value: Dict[str, str]) -> Dict[str, str]:
        """Overlay user variables on DEFAULT_ENV instead of replacing it."""
        return {**DEFAULT_ENV, **value}

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        """Accept log levels in any case."""
        return value.upper() if isinstance(value, str) else value

    @property
    def global_options(self) -> list[str]:
        """Options placed between the executable and the subcommand."""
        return ["-c", "color.ui=never"] if self.disable_color else []

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> GitConfig:
        """
        Build a configuration from ``GITTY_GIT``, ``GITTY_TIMEOUT`` and
        ``GITTY_LOG_LEVEL``.

        A timeout of ``none`` or ``0`` disables the timeout.

        Raises:
            GitConfigError: If a variable holds an invalid value.
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, object] = {}

        if executable := environ.get(f"{ENV_PREFIX}GIT"):
            values["executable"] = executable
        if (timeout := environ.get(f"{ENV_PREFIX}TIMEOUT")) is not None:
            values["timeout"] = (
                None if timeout.strip().lower() in {"", "none", "0"} else timeout
            )
        if log_level := environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
            values["log_level"] = log_level

        return cls._validate(values, source="environment")

    @classmethod
    def load(cls, path: PathLike) -> GitConfig:
        """
        Load a configuration from a JSON file.

        Raises:
            GitConfigError: If the file cannot be read or fails validation.
        """
        config_path = Path(path)
        logger.debug(f"Loading gitty configuration from {config_path}")
        try:
            raw = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise GitConfigError(
                f"Cannot read configuration file {config_path}: {e}",
                original_error=e,
                config_path=str(config_path),
            ) from e

        try:
            config = cls.model_validate_json(raw)
        except ValidationError as e:
            raise _config_error(e, source=str(config_path)) from e

        logger.debug(f"Loaded configuration: {config.model_dump()}")
        return config

    @classmethod
    def _validate(cls, values: Mapping[str, object], source: str) -> GitConfig:
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise _config_error(e, source=source) from e


def _config_error(error: ValidationError, source: str) -> GitConfigError:
    first = error.errors()[0]
    key = ".".join(str(part) for part in first["loc"]) or None
    return GitConfigError(
        f"Invalid gitty configuration from {source}: {first['msg']}"
        + (f" ({key})" if key else ""),
        config_key=key,
        original_error=error,
        source=source,
    )


__all__ = ["GitConfig", "DEFAULT_ENV", "ENV_PREFIX", "PathLike", "LogLevel"]
