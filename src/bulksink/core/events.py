"""
Event and batch types consumed by the bulk submission path.

Both are read-only views produced upstream; nothing in bulksink mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Sequence


@dataclass(frozen=True)
class Event:
    """A single log or metric event: header metadata plus an opaque body."""

    header: Mapping[str, Any] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))
        elif not isinstance(self.body, bytes):
            object.__setattr__(self, "body", bytes(self.body))
        object.__setattr__(self, "header", MappingProxyType(dict(self.header)))

    def __str__(self) -> str:
        body = self.body.decode("utf-8", errors="replace")
        return f"header: {dict(self.header)}, body: {body!r}"


class Batch(Sequence[Event]):
    """Ordered, finite and immutable group of events for one submission."""

    __slots__ = ("_events",)

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events: tuple[Event, ...] = tuple(events)

    def __getitem__(self, index: Any) -> Any:
        return self._events[index]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __repr__(self) -> str:
        return f"Batch(size={len(self._events)})"

    @property
    def events(self) -> tuple[Event, ...]:
        return self._events


__all__ = ["Batch", "Event"]
