from __future__ import annotations

import pytest

from bulksink.metrics.metrics import MetricsCollector


@pytest.mark.asyncio
async def test_disabled_collector_tracks_in_memory() -> None:
    metrics = MetricsCollector(enabled=False)

    await metrics.record_events_submitted(3, duration_seconds=0.01)
    await metrics.record_events_dropped(2)
    await metrics.record_bulk_failure("network")
    await metrics.record_bulk_failure("network")

    snap = await metrics.snapshot()
    assert snap.events_submitted == 3
    assert snap.bulk_requests == 1
    assert snap.events_dropped == 2
    assert snap.bulk_failures == {"network": 2}
    assert metrics.registry is None


@pytest.mark.asyncio
async def test_enabled_collector_exports_prometheus_counters() -> None:
    metrics = MetricsCollector(enabled=True)

    await metrics.record_events_submitted(4, duration_seconds=0.02)
    await metrics.record_events_dropped()
    await metrics.record_bulk_failure("backend")

    registry = metrics.registry
    assert registry is not None
    assert registry.get_sample_value("bulksink_events_submitted_total") == 4
    assert registry.get_sample_value("bulksink_events_dropped_total") == 1
    assert (
        registry.get_sample_value(
            "bulksink_bulk_failures_total", {"cause": "backend"}
        )
        == 1
    )
    assert registry.get_sample_value("bulksink_bulk_request_seconds_count") == 1


@pytest.mark.asyncio
async def test_snapshot_is_a_copy() -> None:
    metrics = MetricsCollector()
    await metrics.record_bulk_failure("render")

    snap = await metrics.snapshot()
    snap.bulk_failures["render"] = 99

    assert (await metrics.snapshot()).bulk_failures == {"render": 1}
