"""
Turns one batch into one ``_bulk`` request and classifies the outcome.

``submit`` either returns the backend's ``BulkResponse`` or raises a
``BulkSinkError`` subclass naming the cause. Nothing is retried here; retry
policy belongs to the caller.
"""

from __future__ import annotations

import asyncio
import time
from typing import Iterable

from ....core.errors import (
    BulkResponseError,
    EmptyBatchError,
    EncodeError,
    SubmissionCancelledError,
)
from ....core.events import Event
from ....metrics.metrics import MetricsCollector
from ...codecs import Codec
from .bulk import BulkIndexEntry, BulkRequest, BulkResponse
from .client import ElasticsearchClient
from .resolver import Aborted, DestinationResolver, Skipped


class BulkSubmitter:
    """Builds and sends a single aggregated bulk request per batch.

    Safe to share between tasks: the only long-lived mutable resource is the
    client, and each call builds its own ``BulkRequest``.
    """

    def __init__(
        self,
        client: ElasticsearchClient,
        resolver: DestinationResolver,
        codec: Codec,
        *,
        etype: str = "",
        op_type: str = "",
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._client = client
        self._resolver = resolver
        self._codec = codec
        self._etype = etype or None
        self._op_type = op_type or None
        self._metrics = metrics

    @property
    def client(self) -> ElasticsearchClient:
        return self._client

    def _encode(self, event: Event) -> bytes:
        try:
            return bytes(self._codec.encode(event))
        except Exception as exc:
            raise EncodeError(f"codec encode event: {event} error", cause=exc) from exc

    def _build(self, events: Iterable[Event]) -> tuple[BulkRequest, int]:
        request = BulkRequest()
        skipped = 0
        for event in events:
            outcome = self._resolver.resolve(event)
            if isinstance(outcome, Aborted):
                raise outcome.error
            if isinstance(outcome, Skipped):
                skipped += 1
                continue
            request.add(
                BulkIndexEntry(
                    index=outcome.index,
                    body=self._encode(event),
                    etype=self._etype,
                    op_type=self._op_type,
                    document_id=outcome.document_id,
                )
            )
        return request, skipped

    def build_request(self, events: Iterable[Event]) -> BulkRequest:
        """Resolve and encode every event, preserving order.

        Raises:
            RenderError: an index render failure the policy did not absorb,
                or any document id render failure.
            EncodeError: the codec rejected an event.
        """
        request, _ = self._build(events)
        return request

    async def submit(
        self, batch: Iterable[Event], *, timeout: float | None = None
    ) -> BulkResponse:
        """Submit ``batch`` as one bulk request.

        Args:
            batch: Events in submission order.
            timeout: Optional deadline in seconds for the network call.

        Raises:
            RenderError, EncodeError: building the request failed; nothing
                was sent.
            EmptyBatchError: every event was skipped or the batch was empty.
            TransportError: the request did not complete;
                ``SubmissionCancelledError`` when the deadline expired.
            BulkResponseError: the backend rejected one or more documents.
        """
        request, skipped = self._build(batch)
        if skipped and self._metrics is not None:
            await self._metrics.record_events_dropped(skipped)
        if not len(request):
            raise EmptyBatchError(
                "request to elasticsearch bulk is null", skipped=skipped
            )

        start = time.perf_counter()
        try:
            if timeout is None:
                response = await self._client.bulk(request)
            else:
                response = await asyncio.wait_for(self._client.bulk(request), timeout)
        except asyncio.TimeoutError as exc:
            raise SubmissionCancelledError(
                f"bulk request exceeded deadline of {timeout}s", cause=exc
            ) from exc

        if response.errors:
            raise BulkResponseError(
                "request to elasticsearch response error",
                raw_response=response.to_json(),
                failed_items=len(response.failed_items()),
            )
        if self._metrics is not None:
            await self._metrics.record_events_submitted(
                len(request), duration_seconds=time.perf_counter() - start
            )
        return response

    async def stop(self) -> None:
        await self._client.stop()


__all__ = ["BulkSubmitter"]
