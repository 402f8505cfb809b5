"""
Bulk API request builder and response model.

The request body is NDJSON: one action line followed by one source line per
entry, every line terminated by ``\\n``. A ``BulkRequest`` is append-only and
belongs to a single submission; it is never shared between batches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

import orjson

from ....core.errors import EncodeError
from ....core.serialization import dumps_compact

DEFAULT_OP_TYPE = "index"


@dataclass(frozen=True)
class BulkIndexEntry:
    """One document plus its routing metadata."""

    index: str
    body: bytes
    etype: str | None = None
    op_type: str | None = None
    document_id: str | None = None

    @property
    def action(self) -> str:
        return self.op_type or DEFAULT_OP_TYPE

    def action_line(self) -> bytes:
        meta: dict[str, Any] = {"_index": self.index}
        if self.etype:
            meta["_type"] = self.etype
        if self.document_id:
            meta["_id"] = self.document_id
        return dumps_compact({self.action: meta})

    def source_line(self) -> bytes:
        body = self.body
        if self.action == "update":
            return b'{"doc":' + _compact(body) + b',"doc_as_upsert":true}'
        if b"\n" in body or b"\r" in body:
            return _compact(body)
        return body


def _compact(body: bytes) -> bytes:
    """Re-encode a JSON document onto a single line."""
    if not body:
        return b"{}"
    if b"\n" not in body and b"\r" not in body:
        return body
    try:
        return dumps_compact(orjson.loads(body))
    except orjson.JSONDecodeError as exc:
        raise EncodeError(
            "document body spans several lines and is not valid JSON", cause=exc
        ) from exc


class BulkRequest:
    """Append-only accumulator of bulk entries for one submission."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[BulkIndexEntry] = []

    def add(self, entry: BulkIndexEntry) -> BulkRequest:
        self._entries.append(entry)
        return self

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[BulkIndexEntry]:
        return iter(self._entries)

    @property
    def number_of_actions(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[BulkIndexEntry, ...]:
        return tuple(self._entries)

    def body(self) -> bytes:
        lines: list[bytes] = []
        for entry in self._entries:
            lines.append(entry.action_line())
            lines.append(entry.source_line())
        if not lines:
            return b""
        return b"\n".join(lines) + b"\n"


@dataclass
class BulkResponse:
    """Outcome of one ``_bulk`` call.

    ``status_code`` is the transport result; ``errors`` is the backend's own
    flag that at least one item was rejected. ``raw`` keeps the undecoded
    payload for diagnostics.
    """

    status_code: int
    errors: bool = False
    took: int | None = None
    items: list[dict[str, Any]] = field(default_factory=list)
    raw: bytes = b""

    @classmethod
    def from_payload(cls, status_code: int, raw: bytes) -> BulkResponse:
        data = orjson.loads(raw) if raw else {}
        if not isinstance(data, dict):
            raise ValueError("bulk response is not a JSON object")
        return cls(
            status_code=status_code,
            errors=bool(data.get("errors", False)),
            took=data.get("took"),
            items=list(data.get("items") or []),
            raw=raw,
        )

    @property
    def transport_ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def succeeded(self) -> bool:
        return self.transport_ok and not self.errors

    def failed_items(self) -> list[dict[str, Any]]:
        failed: list[dict[str, Any]] = []
        for item in self.items:
            for result in item.values():
                if isinstance(result, dict) and result.get("error") is not None:
                    failed.append(result)
        return failed

    def to_json(self) -> str:
        if self.raw:
            return self.raw.decode("utf-8", errors="replace")
        return orjson.dumps(
            {"took": self.took, "errors": self.errors, "items": self.items}
        ).decode("utf-8")


__all__ = ["BulkIndexEntry", "BulkRequest", "BulkResponse", "DEFAULT_OP_TYPE"]
