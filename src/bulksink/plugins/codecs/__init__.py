from __future__ import annotations

from typing import Protocol, runtime_checkable

from ...core.events import Event
from .json import JsonCodec, JsonCodecConfig


@runtime_checkable
class Codec(Protocol):
    """Turns one event into the document bytes written to the backend.

    Implementations raise on events they cannot represent; the submitter
    converts any such failure into an ``EncodeError``.
    """

    def encode(self, event: Event) -> bytes:  # noqa: D401
        ...


__all__ = ["Codec", "JsonCodec", "JsonCodecConfig"]
