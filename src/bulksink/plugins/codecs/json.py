"""
JSON document codec.

The document is the event header with the body stored under ``body_key``.
A header field named like the body key is overwritten by the body.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ...core.events import Event
from ...core.serialization import serialize_mapping_to_json_bytes
from ..utils import parse_plugin_config


class JsonCodecConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    body_key: str = Field(default="body", min_length=1)
    pretty: bool = False
    include_header: bool = True


class JsonCodec:
    name = "json"

    def __init__(self, config: JsonCodecConfig | dict | None = None, **kwargs: Any) -> None:
        self._config = parse_plugin_config(JsonCodecConfig, config, **kwargs)

    def encode(self, event: Event) -> bytes:
        cfg = self._config
        document: dict[str, Any] = dict(event.header) if cfg.include_header else {}
        document[cfg.body_key] = event.body.decode("utf-8", errors="replace")
        return serialize_mapping_to_json_bytes(document, indent=cfg.pretty).data


PLUGIN_METADATA = {
    "name": "json",
    "version": "1.0.0",
    "plugin_type": "codec",
    "entry_point": "bulksink.plugins.codecs.json:JsonCodec",
    "description": "Encodes event header and body as one JSON document.",
    "author": "bulksink core",
    "api_version": "1.0",
}

__all__ = ["JsonCodec", "JsonCodecConfig", "PLUGIN_METADATA"]
