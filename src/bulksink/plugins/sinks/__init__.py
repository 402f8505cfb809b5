from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable

from ...core.events import Event


@runtime_checkable
class BaseSink(Protocol):
    """Base async sink interface.

    Sinks deliver batches of events to an external destination. Submission
    failures are reported through the returned result rather than raised, so
    a failing backend cannot crash the pipeline driving the sink.
    """

    async def start(self) -> None:  # Optional lifecycle hook
        ...

    async def stop(self) -> None:  # Optional lifecycle hook
        ...

    async def consume(self, _batch: Iterable[Event]) -> Any:  # noqa: ARG002, D401
        """Deliver one batch and report the outcome."""
        ...


__all__ = ["BaseSink"]
