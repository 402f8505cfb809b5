"""
Structured internal diagnostics.

Diagnostics are small dict payloads (``component``, ``message`` and free-form
fields) routed through the stdlib ``logging`` logger ``bulksink.diagnostics``
as compact JSON. Tests may install a writer that receives the raw payloads.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import orjson

_logger = logging.getLogger("bulksink.diagnostics")

# Minimum seconds between two emissions sharing a rate limit key
RATE_LIMIT_WINDOW_SECONDS = 5.0

_enabled = True
_writer: Callable[[dict[str, Any]], None] | None = None
_last_emitted: dict[str, float] = {}


def set_writer_for_tests(writer: Callable[[dict[str, Any]], None] | None) -> None:
    """Capture payloads with ``writer`` instead of the logging backend."""
    global _writer
    _writer = writer
    _last_emitted.clear()


def set_enabled(enabled: bool) -> None:
    """Turn internal diagnostics on or off process-wide."""
    global _enabled
    _enabled = enabled


def is_enabled() -> bool:
    return _enabled


def _rate_limited(key: str | None) -> bool:
    if key is None:
        return False
    now = time.monotonic()
    last = _last_emitted.get(key)
    if last is not None and now - last < RATE_LIMIT_WINDOW_SECONDS:
        return True
    _last_emitted[key] = now
    return False


def _emit(level: int, component: str, message: str, fields: dict[str, Any]) -> None:
    if not _enabled:
        return
    if _rate_limited(fields.pop("_rate_limit_key", None)):
        return
    payload: dict[str, Any] = {
        "level": logging.getLevelName(level),
        "component": component,
        "message": message,
        **fields,
    }
    if _writer is not None:
        _writer(payload)
        return
    if not _logger.isEnabledFor(level):
        return
    try:
        text = orjson.dumps(payload, default=str).decode("utf-8")
    except TypeError:
        text = repr(payload)
    _logger.log(level, text)


def warn(component: str, message: str, **fields: Any) -> None:
    _emit(logging.WARNING, component, message, fields)


def error(component: str, message: str, **fields: Any) -> None:
    _emit(logging.ERROR, component, message, fields)


__all__ = ["error", "is_enabled", "set_enabled", "set_writer_for_tests", "warn"]
