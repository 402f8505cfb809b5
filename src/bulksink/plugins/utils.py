"""
Plugin configuration parsing.
"""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ConfigurationError

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def parse_plugin_config(
    model: type[ConfigT],
    config: ConfigT | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> ConfigT:
    """Build a plugin config from a model instance, a mapping, or kwargs.

    Keyword arguments override keys of a mapping config. Passing both a model
    instance and keyword arguments returns a copy with those fields replaced.

    Raises:
        ConfigurationError: if validation fails.
    """
    try:
        if isinstance(config, model):
            if not kwargs:
                return config
            return model.model_validate({**config.model_dump(), **kwargs})
        data: dict[str, Any] = dict(config or {})
        data.update(kwargs)
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigurationError(
            f"Invalid {model.__name__}: {exc.error_count()} validation error(s)",
            cause=exc,
            component_name=model.__name__,
        ) from exc


__all__ = ["parse_plugin_config"]
