"""
Configuration models for bulksink using Pydantic v2 Settings.

Values come from keyword arguments or ``BULKSINK_``-prefixed environment
variables, with ``__`` separating nested groups, e.g.
``BULKSINK_ELASTICSEARCH__HOSTS=es1:9200,es2:9200``. Hosts also accept a
JSON list.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from ..plugins.sinks.elasticsearch.config import ElasticsearchSinkConfig
from . import diagnostics
from .errors import ConfigurationError

# Keep explicit version to allow schema gating and forward migrations later
LATEST_CONFIG_SCHEMA_VERSION = "1.0"


class CoreSettings(BaseModel):
    """Process-wide knobs that are not specific to one backend."""

    app_name: str = Field(default="bulksink", description="Logical application name")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Level of the bulksink logger hierarchy",
    )
    # Structured internal diagnostics, e.g. index render failures
    internal_logging_enabled: bool = Field(
        default=True,
        description="Emit WARN/ERROR diagnostics for absorbed errors",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible metrics",
    )
    request_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Deadline for one bulk submission; unset means no deadline",
    )


class Settings(BaseSettings):
    """Top-level configuration model with versioning and sink settings."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    core: CoreSettings = Field(default_factory=CoreSettings)
    elasticsearch: ElasticsearchSinkConfig | None = None

    model_config = SettingsConfigDict(
        env_prefix="BULKSINK_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


def load_settings(**overrides: object) -> Settings:
    """Build ``Settings`` from the environment plus ``overrides``.

    Raises:
        ConfigurationError: if validation fails.
    """
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except PydanticValidationError as exc:
        raise ConfigurationError(
            f"Invalid settings: {exc.error_count()} validation error(s)", cause=exc
        ) from exc
    except SettingsError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}", cause=exc) from exc


def configure_logging(settings: Settings) -> None:
    """Apply ``core.log_level`` and the internal diagnostics toggle."""
    logging.getLogger("bulksink").setLevel(settings.core.log_level)
    diagnostics.set_enabled(settings.core.internal_logging_enabled)


__all__ = [
    "CoreSettings",
    "LATEST_CONFIG_SCHEMA_VERSION",
    "Settings",
    "configure_logging",
    "load_settings",
]
