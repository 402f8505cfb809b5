"""
Pluggable codecs and sinks.
"""

from __future__ import annotations

from .codecs import Codec, JsonCodec
from .sinks import BaseSink
from .sinks.elasticsearch import ElasticsearchSink

__all__ = ["BaseSink", "Codec", "ElasticsearchSink", "JsonCodec"]
