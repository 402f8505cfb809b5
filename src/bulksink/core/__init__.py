"""
Core types shared by codecs and sinks.
"""

from __future__ import annotations

from .errors import (
    BulkResponseError,
    BulkSinkError,
    ConfigurationError,
    DocumentIdRenderError,
    EmptyBatchError,
    EncodeError,
    ErrorCategory,
    ErrorRecoveryStrategy,
    ErrorSeverity,
    PatternRenderError,
    RenderError,
    SubmissionCancelledError,
    TransportError,
)
from .events import Batch, Event
from .pattern import Pattern

__all__ = [
    "Batch",
    "BulkResponseError",
    "BulkSinkError",
    "ConfigurationError",
    "DocumentIdRenderError",
    "EmptyBatchError",
    "EncodeError",
    "ErrorCategory",
    "ErrorRecoveryStrategy",
    "ErrorSeverity",
    "Event",
    "Pattern",
    "PatternRenderError",
    "RenderError",
    "SubmissionCancelledError",
    "TransportError",
]
