"""
Template patterns used to route events.

A pattern is literal text with embedded ``${...}`` references:

- ``${kubernetes.namespace}``: dotted lookup into the event header
- ``${+YYYY.MM.DD}``: current UTC time in a Joda-like layout
- ``${_env.CLUSTER}``: process environment variable

``render_strict`` raises ``PatternRenderError`` on the first header or
environment reference that is missing (or ``None``); ``render`` substitutes
an empty string instead.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from .errors import ConfigurationError, PatternRenderError

_REFERENCE = re.compile(r"\$\{([^{}]*)\}")
_TIME_PREFIX = "+"
_ENV_PREFIX = "_env."

# Longest tokens first so that "YYYY" is not consumed as two "YY"
_TIME_TOKENS: tuple[tuple[str, str], ...] = (
    ("YYYY", "%Y"),
    ("YY", "%y"),
    ("MM", "%m"),
    ("DD", "%d"),
    ("hh", "%H"),
    ("mm", "%M"),
    ("ss", "%S"),
)
_TIME_TOKEN_RE = re.compile("|".join(token for token, _ in _TIME_TOKENS))
_TIME_TOKEN_MAP = dict(_TIME_TOKENS)

_MISSING = object()


def _to_strftime(layout: str) -> str:
    escaped = layout.replace("%", "%%")
    return _TIME_TOKEN_RE.sub(lambda m: _TIME_TOKEN_MAP[m.group(0)], escaped)


def lookup(obj: Mapping[str, Any], path: str) -> Any:
    """Resolve ``path`` in ``obj``; an exact key wins over a dotted walk."""
    if path in obj:
        return obj[path]
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


@dataclass(frozen=True)
class _Segment:
    kind: str  # "literal" | "field" | "time" | "env"
    value: str


class Pattern:
    """Compiled template; immutable and safe to share across tasks."""

    def __init__(
        self,
        text: str,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._text = text
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._segments = self._parse(text)

    @classmethod
    def compile(cls, text: str, **kwargs: Any) -> Pattern:
        return cls(text, **kwargs)

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_constant(self) -> bool:
        return all(seg.kind == "literal" for seg in self._segments)

    def __repr__(self) -> str:
        return f"Pattern({self._text!r})"

    @staticmethod
    def _parse(text: str) -> tuple[_Segment, ...]:
        segments: list[_Segment] = []
        pos = 0
        for match in _REFERENCE.finditer(text):
            if match.start() > pos:
                literal = text[pos : match.start()]
                if "${" in literal:
                    raise ConfigurationError(f"unclosed reference in pattern {text!r}")
                segments.append(_Segment("literal", literal))
            ref = match.group(1).strip()
            if not ref:
                raise ConfigurationError(f"empty reference in pattern {text!r}")
            if ref.startswith(_TIME_PREFIX):
                segments.append(_Segment("time", _to_strftime(ref[1:])))
            elif ref.startswith(_ENV_PREFIX):
                segments.append(_Segment("env", ref[len(_ENV_PREFIX) :]))
            else:
                segments.append(_Segment("field", ref))
            pos = match.end()
        tail = text[pos:]
        if "${" in tail:
            raise ConfigurationError(f"unclosed reference in pattern {text!r}")
        if tail:
            segments.append(_Segment("literal", tail))
        return tuple(segments)

    def _render(self, obj: Mapping[str, Any], strict: bool) -> str:
        out: list[str] = []
        now: datetime | None = None
        for seg in self._segments:
            if seg.kind == "literal":
                out.append(seg.value)
                continue
            if seg.kind == "time":
                if now is None:
                    now = self._clock()
                out.append(now.strftime(seg.value))
                continue
            if seg.kind == "env":
                value: Any = os.environ.get(seg.value, _MISSING)
                ref = _ENV_PREFIX + seg.value
            else:
                value = lookup(obj, seg.value)
                ref = seg.value
            if value is _MISSING or value is None:
                if strict:
                    raise PatternRenderError(
                        f"reference ${{{ref}}} in pattern {self._text!r} "
                        "is not defined",
                        reference=ref,
                    )
                continue
            if isinstance(value, str):
                out.append(value)
                continue
            try:
                out.append(str(value))
            except Exception as exc:
                raise PatternRenderError(
                    f"reference ${{{ref}}} in pattern {self._text!r} "
                    "cannot be rendered as text",
                    reference=ref,
                    cause=exc,
                ) from exc
        return "".join(out)

    def render(self, obj: Mapping[str, Any]) -> str:
        """Render with undefined references replaced by empty text."""
        return self._render(obj, strict=False)

    def render_strict(self, obj: Mapping[str, Any]) -> str:
        """Render, raising ``PatternRenderError`` on undefined references."""
        return self._render(obj, strict=True)


__all__ = ["Pattern", "lookup"]
