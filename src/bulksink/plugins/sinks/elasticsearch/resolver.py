"""
Per-event destination resolution.

The index pattern is rendered strictly. When that fails the configured
``RenderIndexFailedPolicy`` picks exactly one outcome: render the default
index pattern instead, drop the event, or abort the batch. The document id
pattern has no fallback; a failure there always aborts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ....core import diagnostics
from ....core.errors import (
    BulkSinkError,
    DocumentIdRenderError,
    PatternRenderError,
    RenderError,
)
from ....core.events import Event
from ....core.pattern import Pattern
from .config import ElasticsearchSinkConfig, RenderIndexFailedPolicy

_COMPONENT = "elasticsearch-sink"


@dataclass(frozen=True)
class Resolved:
    index: str
    document_id: str | None = None
    used_default_index: bool = False


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class Aborted:
    error: BulkSinkError


Resolution = Union[Resolved, Skipped, Aborted]


class DestinationResolver:
    """Decides index and document id for each event.

    Holds only compiled patterns and the failure policy, so one instance can
    serve any number of concurrent submissions.
    """

    def __init__(
        self,
        index_pattern: Pattern,
        *,
        policy: RenderIndexFailedPolicy | None = None,
        default_index_pattern: Pattern | None = None,
        document_id_pattern: Pattern | None = None,
    ) -> None:
        self._index = index_pattern
        self._policy = policy or RenderIndexFailedPolicy()
        self._default_index = default_index_pattern
        self._document_id = document_id_pattern

    @classmethod
    def from_config(cls, config: ElasticsearchSinkConfig) -> DestinationResolver:
        policy = config.if_render_index_failed
        return cls(
            Pattern.compile(config.index),
            policy=policy,
            default_index_pattern=(
                Pattern.compile(policy.default_index) if policy.default_index else None
            ),
            document_id_pattern=(
                Pattern.compile(config.document_id) if config.document_id else None
            ),
        )

    def resolve(self, event: Event) -> Resolution:
        header = event.header
        used_default = False
        try:
            index = self._index.render_strict(header)
        except PatternRenderError as exc:
            outcome = self._on_index_failure(event, exc)
            if not isinstance(outcome, str):
                return outcome
            index = outcome
            used_default = True

        document_id: str | None = None
        if self._document_id is not None:
            try:
                document_id = self._document_id.render(header)
            except PatternRenderError as exc:
                return Aborted(
                    DocumentIdRenderError(
                        f"format document id {self._document_id.text!r} failed",
                        cause=exc,
                    )
                )
        return Resolved(index, document_id, used_default)

    def _on_index_failure(
        self, event: Event, exc: PatternRenderError
    ) -> str | Skipped | Aborted:
        policy = self._policy
        if not policy.ignore_error:
            diagnostics.error(
                _COMPONENT,
                "render elasticsearch index error",
                error=str(exc),
                event=str(event),
            )

        if self._default_index is not None:
            try:
                return self._default_index.render(event.header)
            except PatternRenderError as default_exc:
                diagnostics.error(
                    _COMPONENT,
                    "render default index error",
                    error=str(default_exc),
                )
                return Skipped("default index render failed")
        if policy.drop_event:
            return Skipped("index render failed")
        return Aborted(RenderError("render elasticsearch index error", cause=exc))


__all__ = ["Aborted", "DestinationResolver", "Resolution", "Resolved", "Skipped"]
