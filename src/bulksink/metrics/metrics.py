"""
Async-first submission metrics for bulksink.

Implements minimal Prometheus-compatible counters for documents submitted,
events dropped and failed bulk calls.

Design goals:
- Pure async/await, no blocking I/O
- Zero global state; instances are sink-scoped
- Safe no-op behavior when metrics are disabled by settings
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class SubmissionMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    events_submitted: int = 0
    events_dropped: int = 0
    bulk_requests: int = 0
    bulk_failures: dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """Sink-scoped async metrics collector.

    If metrics are disabled, exporter calls are skipped while basic in-memory
    counters are still tracked for tests.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = asyncio.Lock()
        self._state = SubmissionMetrics()

        self._c_submitted: Any | None = None
        self._c_dropped: Any | None = None
        self._c_failures: Any | None = None
        self._h_bulk_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Isolated registry to avoid global duplication in tests
            self._registry = CollectorRegistry()
            self._c_submitted = Counter(
                "bulksink_events_submitted_total",
                "Total number of documents accepted by the backend",
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "bulksink_events_dropped_total",
                "Total number of events dropped before submission",
                registry=self._registry,
            )
            self._c_failures = Counter(
                "bulksink_bulk_failures_total",
                "Total number of failed bulk submissions",
                ["cause"],
                registry=self._registry,
            )
            self._h_bulk_latency = Histogram(
                "bulksink_bulk_request_seconds",
                "Latency of one bulk submission",
                buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    async def record_events_submitted(
        self, count: int, *, duration_seconds: float | None = None
    ) -> None:
        async with self._lock:
            self._state.events_submitted += count
            self._state.bulk_requests += 1
        if not self._enabled:
            return
        if self._c_submitted is not None:
            self._c_submitted.inc(count)
        if duration_seconds is not None and self._h_bulk_latency is not None:
            self._h_bulk_latency.observe(duration_seconds)

    async def record_events_dropped(self, count: int = 1) -> None:
        async with self._lock:
            self._state.events_dropped += count
        if self._enabled and self._c_dropped is not None:
            self._c_dropped.inc(count)

    async def record_bulk_failure(self, cause: str) -> None:
        async with self._lock:
            failures = self._state.bulk_failures
            failures[cause] = failures.get(cause, 0) + 1
        if self._enabled and self._c_failures is not None:
            self._c_failures.labels(cause=cause).inc()

    async def snapshot(self) -> SubmissionMetrics:
        # Lightweight copy without exposing internals
        async with self._lock:
            return SubmissionMetrics(
                events_submitted=self._state.events_submitted,
                events_dropped=self._state.events_dropped,
                bulk_requests=self._state.bulk_requests,
                bulk_failures=dict(self._state.bulk_failures),
            )


__all__ = ["MetricsCollector", "SubmissionMetrics"]
