from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from bulksink import create_sink
from bulksink.core.errors import (
    BulkResponseError,
    ConfigurationError,
    EmptyBatchError,
    RenderError,
    TransportError,
)
from bulksink.core.events import Batch, Event
from bulksink.core.settings import Settings
from bulksink.metrics.metrics import MetricsCollector
from bulksink.plugins.sinks import BaseSink
from bulksink.plugins.sinks.elasticsearch import (
    PLUGIN_METADATA,
    ElasticsearchSink,
    ResultStatus,
)


class _Backend:
    """Minimal ``_bulk`` endpoint for httpx.MockTransport."""

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self.responses = responses or []
        self.bodies: list[bytes] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(request.read())
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, json={"took": 1, "errors": False, "items": []})

    def documents(self) -> list[tuple[dict[str, Any], dict[str, Any]]]:
        lines = self.bodies[-1].decode().splitlines()
        return [
            (json.loads(lines[i]), json.loads(lines[i + 1]))
            for i in range(0, len(lines), 2)
        ]


def _sink(backend: _Backend, **overrides: Any) -> ElasticsearchSink:
    data: dict[str, Any] = {"hosts": ["es:9200"], "index": "logs-${app}"}
    data.update(overrides)
    return ElasticsearchSink(data, transport=httpx.MockTransport(backend))


@pytest.mark.asyncio
async def test_consume_success_writes_documents() -> None:
    backend = _Backend()
    sink = _sink(backend, document_id="${trace}")
    await sink.start()

    result = await sink.consume(
        Batch(
            [
                Event({"app": "api", "trace": "t1"}, b"first"),
                Event({"app": "web", "trace": "t2"}, b"second"),
            ]
        )
    )
    await sink.stop()

    assert result.ok
    assert result.status is ResultStatus.SUCCESS
    docs = backend.documents()
    assert docs[0] == (
        {"index": {"_index": "logs-api", "_id": "t1"}},
        {"app": "api", "trace": "t1", "body": "first"},
    )
    assert docs[1][0]["index"]["_index"] == "logs-web"


@pytest.mark.asyncio
async def test_consume_empty_batch_is_drop() -> None:
    backend = _Backend()
    sink = _sink(backend)
    await sink.start()

    result = await sink.consume(Batch())
    await sink.stop()

    assert result.status is ResultStatus.DROP
    assert isinstance(result.error, EmptyBatchError)
    assert backend.bodies == []


@pytest.mark.asyncio
async def test_consume_render_failure_is_fail(captured_diagnostics: list) -> None:
    backend = _Backend()
    metrics = MetricsCollector()
    sink = ElasticsearchSink(
        {
            "hosts": ["es:9200"],
            "index": "logs-${app}",
            "if_render_index_failed": {"drop_event": False},
        },
        metrics=metrics,
        transport=httpx.MockTransport(backend),
    )
    await sink.start()

    result = await sink.consume(Batch([Event({}, b"x")]))

    assert result.status is ResultStatus.FAIL
    assert isinstance(result.error, RenderError)
    assert await sink.health_check() is False
    snap = await metrics.snapshot()
    assert snap.bulk_failures == {"render": 1}
    assert [p["message"] for p in captured_diagnostics] == [
        "render elasticsearch index error"
    ]
    await sink.stop()


@pytest.mark.asyncio
async def test_ignored_render_failure_emits_no_diagnostics(
    captured_diagnostics: list,
) -> None:
    sink = _sink(
        _Backend(),
        if_render_index_failed={"drop_event": False, "ignore_error": True},
    )
    await sink.start()

    result = await sink.consume(Batch([Event({}, b"x")]))
    await sink.stop()

    assert result.status is ResultStatus.FAIL
    assert isinstance(result.error, RenderError)
    assert captured_diagnostics == []


@pytest.mark.asyncio
async def test_consume_partial_failure_is_fail() -> None:
    backend = _Backend(
        [
            httpx.Response(
                200,
                json={"took": 1, "errors": True, "items": [{"index": {"error": {}}}]},
            )
        ]
    )
    sink = _sink(backend)
    await sink.start()

    result = await sink.consume(Batch([Event({"app": "a"})]))
    await sink.stop()

    assert result.status is ResultStatus.FAIL
    assert isinstance(result.error, BulkResponseError)
    assert '"errors":true' in result.error.raw_response.replace(" ", "")


@pytest.mark.asyncio
async def test_consume_before_start_fails() -> None:
    sink = _sink(_Backend())

    result = await sink.consume(Batch([Event({"app": "a"})]))

    assert result.status is ResultStatus.FAIL
    assert isinstance(result.error, TransportError)


@pytest.mark.asyncio
async def test_health_recovers_after_success() -> None:
    backend = _Backend([httpx.Response(500), httpx.Response(200, json={"errors": False})])
    sink = _sink(backend)
    await sink.start()

    await sink.consume(Batch([Event({"app": "a"})]))
    assert await sink.health_check() is False
    await sink.consume(Batch([Event({"app": "a"})]))
    assert await sink.health_check() is True
    await sink.stop()


@pytest.mark.asyncio
async def test_stop_is_idempotent_and_safe_before_start() -> None:
    sink = _sink(_Backend())

    await sink.stop()
    await sink.start()
    await sink.stop()
    await sink.stop()

    assert await sink.health_check() is False


@pytest.mark.asyncio
async def test_failed_sniff_leaves_sink_stopped() -> None:
    backend = _Backend([httpx.Response(500)])
    sink = _sink(backend, sniff=True)

    with pytest.raises(ConfigurationError):
        await sink.start()

    await sink.stop()
    result = await sink.consume(Batch([Event({"app": "a"})]))
    assert result.status is ResultStatus.FAIL


def test_invalid_pattern_fails_at_construction() -> None:
    with pytest.raises(ConfigurationError):
        _sink(_Backend(), index="logs-${app")


def test_sink_satisfies_base_protocol() -> None:
    assert isinstance(_sink(_Backend()), BaseSink)
    assert PLUGIN_METADATA["name"] == ElasticsearchSink.name


def test_create_sink_requires_elasticsearch_settings() -> None:
    with pytest.raises(ConfigurationError):
        create_sink(Settings())


def test_create_sink_from_settings() -> None:
    settings = Settings(
        core={"enable_metrics": True, "request_timeout_seconds": 2.5},
        elasticsearch={"hosts": ["es:9200"], "index": "logs"},
    )

    sink = create_sink(settings)

    assert sink.config.index == "logs"
    assert sink._request_timeout == 2.5  # type: ignore[attr-defined]
