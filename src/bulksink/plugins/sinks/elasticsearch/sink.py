"""
Elasticsearch sink: lifecycle plus batch consumption on top of ``BulkSubmitter``.

``consume`` never raises for submission failures. It reports them as a
``ConsumeResult`` so the pipeline can tell drop signals (nothing to send)
from failures it should retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

import httpx

from ....core.errors import BulkSinkError, EmptyBatchError, TransportError
from ....core.events import Event
from ....metrics.metrics import MetricsCollector
from ...codecs import Codec, JsonCodec
from ...utils import parse_plugin_config
from .bulk import BulkResponse
from .client import ElasticsearchClient
from .config import ElasticsearchSinkConfig
from .resolver import DestinationResolver
from .submitter import BulkSubmitter


class ResultStatus(str, Enum):
    SUCCESS = "success"
    DROP = "drop"
    FAIL = "fail"


@dataclass(frozen=True)
class ConsumeResult:
    status: ResultStatus
    error: BulkSinkError | None = None
    response: BulkResponse | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS


def _failure_cause(error: BulkSinkError) -> str:
    return error.context.category.value


class ElasticsearchSink:
    """Writes batches of events to Elasticsearch through the bulk API."""

    name = "elasticsearch"

    def __init__(
        self,
        config: ElasticsearchSinkConfig | dict | None = None,
        *,
        codec: Codec | None = None,
        metrics: MetricsCollector | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        request_timeout_seconds: float | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(ElasticsearchSinkConfig, config, **kwargs)
        self._config = cfg
        self._codec: Codec = codec or JsonCodec(cfg.codec)
        self._metrics = metrics
        self._transport = transport
        self._request_timeout = request_timeout_seconds
        # Compile patterns eagerly so a bad pattern fails at construction
        self._resolver = DestinationResolver.from_config(cfg)
        self._submitter: BulkSubmitter | None = None
        self._last_status: ResultStatus | None = None

    @property
    def config(self) -> ElasticsearchSinkConfig:
        return self._config

    async def start(self) -> None:
        if self._submitter is not None:
            return
        client = ElasticsearchClient(self._config, transport=self._transport)
        try:
            await client.start()
        except BaseException:
            await client.stop()
            raise
        self._submitter = BulkSubmitter(
            client,
            self._resolver,
            self._codec,
            etype=self._config.etype,
            op_type=self._config.op_type,
            metrics=self._metrics,
        )

    async def stop(self) -> None:
        submitter, self._submitter = self._submitter, None
        if submitter is not None:
            await submitter.stop()

    async def consume(self, batch: Iterable[Event]) -> ConsumeResult:
        submitter = self._submitter
        if submitter is None:
            result = ConsumeResult(
                ResultStatus.FAIL, TransportError("elasticsearch sink is not started")
            )
            self._last_status = result.status
            return result

        try:
            response = await submitter.submit(batch, timeout=self._request_timeout)
        except EmptyBatchError as exc:
            result = ConsumeResult(ResultStatus.DROP, exc)
        except BulkSinkError as exc:
            if self._metrics is not None:
                await self._metrics.record_bulk_failure(_failure_cause(exc))
            result = ConsumeResult(ResultStatus.FAIL, exc)
        else:
            result = ConsumeResult(ResultStatus.SUCCESS, response=response)
        self._last_status = result.status
        return result

    async def health_check(self) -> bool:
        return self._submitter is not None and self._last_status in (
            None,
            ResultStatus.SUCCESS,
            ResultStatus.DROP,
        )


# Plugin metadata for discovery
PLUGIN_METADATA = {
    "name": "elasticsearch",
    "version": "1.0.0",
    "plugin_type": "sink",
    "entry_point": "bulksink.plugins.sinks.elasticsearch:ElasticsearchSink",
    "description": "Elasticsearch sink writing batches through the bulk API.",
    "author": "bulksink core",
    "api_version": "1.0",
    "dependencies": ["httpx>=0.24"],
}

__all__ = ["ConsumeResult", "ElasticsearchSink", "PLUGIN_METADATA", "ResultStatus"]
