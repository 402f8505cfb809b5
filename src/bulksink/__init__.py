"""
Public entrypoints for bulksink.

Provides ``create_sink()`` which wires settings, metrics and the JSON codec
into a ready-to-start ``ElasticsearchSink``.
"""

from __future__ import annotations

from ._version import __version__
from .core.errors import (
    BulkResponseError,
    BulkSinkError,
    ConfigurationError,
    EmptyBatchError,
    EncodeError,
    RenderError,
    SubmissionCancelledError,
    TransportError,
)
from .core.events import Batch, Event
from .core.settings import Settings, configure_logging, load_settings
from .metrics.metrics import MetricsCollector
from .plugins.codecs import Codec
from .plugins.sinks.elasticsearch import (
    BulkSubmitter,
    ConsumeResult,
    ElasticsearchSink,
    ElasticsearchSinkConfig,
    ResultStatus,
)

__all__ = [
    "Batch",
    "BulkResponseError",
    "BulkSinkError",
    "BulkSubmitter",
    "ConfigurationError",
    "ConsumeResult",
    "ElasticsearchSink",
    "ElasticsearchSinkConfig",
    "EmptyBatchError",
    "EncodeError",
    "Event",
    "MetricsCollector",
    "RenderError",
    "ResultStatus",
    "Settings",
    "SubmissionCancelledError",
    "TransportError",
    "VERSION",
    "__version__",
    "create_sink",
]

VERSION = __version__


def create_sink(
    settings: Settings | None = None,
    *,
    codec: Codec | None = None,
) -> ElasticsearchSink:
    """Return an unstarted Elasticsearch sink built from settings.

    Example:
        ```python
        sink = create_sink()  # reads BULKSINK_* environment variables
        await sink.start()
        result = await sink.consume(Batch([Event({"app": "api"}, b"hello")]))
        await sink.stop()
        ```

    Raises:
        ConfigurationError: if no ``elasticsearch`` settings are available or
            a pattern cannot be compiled.
    """
    settings = settings or load_settings()
    if settings.elasticsearch is None:
        raise ConfigurationError(
            "elasticsearch settings are required",
            component_name="elasticsearch",
        )
    configure_logging(settings)
    return ElasticsearchSink(
        settings.elasticsearch,
        codec=codec,
        metrics=MetricsCollector(enabled=settings.core.enable_metrics),
        request_timeout_seconds=settings.core.request_timeout_seconds,
    )
