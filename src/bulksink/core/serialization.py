"""
JSON serialization helpers built on orjson.

Documents are emitted as bytes without an intermediate ``str`` so that the
bulk request body can be assembled by concatenation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import orjson

from .errors import EncodeError, ErrorSeverity


def _default(obj: Any) -> Any:
    """Default serializer hook for unsupported types.

    Keep minimal; prefer upstream objects to be plain JSON types already.
    """
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, Mapping):
        return dict(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj).decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


@dataclass
class SerializedView:
    """Serialized JSON document bytes."""

    data: bytes


def serialize_mapping_to_json_bytes(
    payload: Mapping[str, Any],
    *,
    indent: bool = False,
) -> SerializedView:
    """Serialize a mapping to JSON bytes using orjson.

    Raises ``EncodeError`` when a value cannot be represented in JSON.
    """
    option = 0
    if indent:
        option |= orjson.OPT_INDENT_2
    try:
        data = orjson.dumps(payload, default=_default, option=option)
    except TypeError as e:
        raise EncodeError(
            "Serialization failed",
            severity=ErrorSeverity.HIGH,
            cause=e,
        ) from e
    return SerializedView(data=data)


def dumps_compact(payload: Any) -> bytes:
    """Single-line JSON for NDJSON framing; never contains a raw newline."""
    return orjson.dumps(payload, default=_default)


__all__ = ["SerializedView", "dumps_compact", "serialize_mapping_to_json_bytes"]
