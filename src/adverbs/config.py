"""Configuration schema and resolution.

Configuration is resolved once into an immutable ``FrozenConfig`` that flows
into the adverbs which need it. Precedence: explicit overrides, then
``ADVERBS_*`` environment variables (a project ``.env`` is honoured), then the
``Settings`` defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from adverbs.errors import ConfigurationError
from adverbs.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping

ENV_PREFIX = "ADVERBS_"

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Validation schema and defaults for every configuration field."""

    # Fan-out bound for map_concurrent; 0 means unbounded.
    request_concurrency: int = Field(default=0, ge=0)

    # Which diagnostic channels wrap_quiet turns into notices.
    capture_stdout: bool = Field(default=True)
    capture_stderr: bool = Field(default=True)
    capture_warnings: bool = Field(default=True)
    capture_logging: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    retry_max_attempts: int = Field(default=3, ge=1)
    retry_initial_delay_s: float = Field(default=0.5, ge=0)
    retry_max_delay_s: float = Field(default=5.0, ge=0)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept level names in any case; reject unknown names."""
        if isinstance(v, int):
            name = logging.getLevelName(v)
            if name in _LEVEL_NAMES:
                return name
            raise ValueError(f"unknown log level {v!r}")
        if isinstance(v, str):
            name = v.strip().upper()
            if name == "WARN":
                name = "WARNING"
            if name not in _LEVEL_NAMES:
                raise ValueError(
                    f"log_level must be one of {', '.join(_LEVEL_NAMES)}"
                )
            return name
        return v


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable, validated configuration."""

    request_concurrency: int
    capture_stdout: bool
    capture_stderr: bool
    capture_warnings: bool
    capture_logging: bool
    log_level: str
    retry_max_attempts: int
    retry_initial_delay_s: float
    retry_max_delay_s: float

    @property
    def log_level_no(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            initial_delay_s=self.retry_initial_delay_s,
            max_delay_s=self.retry_max_delay_s,
        )


def _env_values(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``ADVERBS_<FIELD>`` values for known fields."""
    values: dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip() != "":
            values[name] = raw.strip()
    return values


def _field_hint(exc: ValidationError) -> str:
    fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
    if not fields:
        return "Check the configuration values."
    env_keys = ", ".join(f"{ENV_PREFIX}{f.upper()}" for f in fields)
    return f"Check {', '.join(fields)} (overrides or {env_keys})."


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> FrozenConfig:
    """Resolve configuration from overrides, environment and defaults.

    Args:
        overrides: Highest-precedence field values.
        environ: Environment mapping to read; defaults to ``os.environ`` after
            loading a project ``.env`` file.

    Raises:
        ConfigurationError: When a value fails validation or a key is unknown.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    merged = {**_env_values(environ), **dict(overrides or {})}
    try:
        settings = Settings(**merged)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration: {exc.error_count()} error(s)",
            hint=_field_hint(exc),
        ) from exc

    return FrozenConfig(**settings.model_dump())
