"""
Basic usage example for bulksink.

Routes a small batch into per-service daily indices on a local Elasticsearch
and prints the outcome of the submission.
"""

import asyncio

from bulksink import Batch, ElasticsearchSink, Event, MetricsCollector


async def main() -> None:
    metrics = MetricsCollector(enabled=True)
    sink = ElasticsearchSink(
        {
            "hosts": ["localhost:9200"],
            "index": "logs-${service}-${+YYYY.MM.DD}",
            "document_id": "${trace_id}",
            "if_render_index_failed": {"default_index": "logs-unrouted"},
        },
        metrics=metrics,
    )
    await sink.start()
    try:
        batch = Batch(
            [
                Event({"service": "api", "trace_id": "a1"}, b"GET /health 200"),
                Event({"service": "worker", "trace_id": "b2"}, b"job done"),
                # No service header: lands in the default index
                Event({"trace_id": "c3"}, b"orphan line"),
            ]
        )
        result = await sink.consume(batch)
        print(f"status={result.status.value} error={result.error}")
        print(await metrics.snapshot())
    finally:
        await sink.stop()


if __name__ == "__main__":
    asyncio.run(main())
