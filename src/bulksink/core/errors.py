"""
Error hierarchy for bulksink.

Every failure surfaced by the bulk submission path is a ``BulkSinkError``
subclass. The concrete class names the cause (render, encode, transport,
backend partial failure, empty batch), and each instance carries an
``ErrorContext`` with category, severity and the suggested recovery so that
callers can decide on retry policy without string matching.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """High level grouping of errors for routing and metrics."""

    CONFIG = "config"
    RENDER = "render"
    SERIALIZATION = "serialization"
    NETWORK = "network"
    BACKEND = "backend"
    DROP = "drop"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorRecoveryStrategy(str, Enum):
    """What an upstream caller is expected to do with the failed batch."""

    NONE = "none"
    RETRY = "retry"
    DROP = "drop"
    FAIL_FAST = "fail_fast"


@dataclass
class ErrorContext:
    category: ErrorCategory
    severity: ErrorSeverity
    recovery_strategy: ErrorRecoveryStrategy = ErrorRecoveryStrategy.NONE
    component_name: str | None = None
    error_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "recovery_strategy": self.recovery_strategy.value,
            "component_name": self.component_name,
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": dict(self.metadata),
        }


def create_error_context(
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    recovery_strategy: ErrorRecoveryStrategy = ErrorRecoveryStrategy.NONE,
    **metadata: Any,
) -> ErrorContext:
    component_name = metadata.pop("component_name", None)
    return ErrorContext(
        category=category,
        severity=severity,
        recovery_strategy=recovery_strategy,
        component_name=component_name,
        metadata=metadata,
    )


class BulkSinkError(Exception):
    """Base class for all bulksink errors.

    Args:
        message: Human readable description.
        category: Error category; subclasses provide a default.
        severity: Error severity; subclasses provide a default.
        recovery_strategy: Hint for the caller's retry policy.
        error_context: Pre-built context, overrides the three fields above.
        cause: Underlying exception, chained as ``__cause__``.
        **metadata: Extra diagnostic fields stored on the context.
    """

    default_category = ErrorCategory.SYSTEM
    default_severity = ErrorSeverity.MEDIUM
    default_recovery = ErrorRecoveryStrategy.NONE

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        recovery_strategy: ErrorRecoveryStrategy | None = None,
        error_context: ErrorContext | None = None,
        cause: BaseException | None = None,
        **metadata: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_context is None:
            error_context = create_error_context(
                category or self.default_category,
                severity or self.default_severity,
                recovery_strategy or self.default_recovery,
                **metadata,
            )
        self.context = error_context
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "cause": repr(self.__cause__) if self.__cause__ is not None else None,
            "context": self.context.to_dict(),
        }


class ConfigurationError(BulkSinkError):
    """Invalid configuration or a client that cannot be constructed."""

    default_category = ErrorCategory.CONFIG
    default_severity = ErrorSeverity.CRITICAL
    default_recovery = ErrorRecoveryStrategy.FAIL_FAST


class PatternRenderError(BulkSinkError):
    """A template reference could not be resolved."""

    default_category = ErrorCategory.RENDER
    default_severity = ErrorSeverity.LOW

    def __init__(self, message: str, *, reference: str | None = None, **kwargs: Any):
        super().__init__(message, reference=reference, **kwargs)
        self.reference = reference


class RenderError(BulkSinkError):
    """Index rendering failed and no failure policy absorbed it."""

    default_category = ErrorCategory.RENDER
    default_severity = ErrorSeverity.HIGH


class DocumentIdRenderError(RenderError):
    """Document id rendering failed; there is no fallback for ids."""


class EncodeError(BulkSinkError):
    default_category = ErrorCategory.SERIALIZATION
    default_severity = ErrorSeverity.HIGH


class EmptyBatchError(BulkSinkError):
    """Nothing left to send once every event was skipped or dropped."""

    default_category = ErrorCategory.DROP
    default_severity = ErrorSeverity.LOW
    default_recovery = ErrorRecoveryStrategy.DROP


class TransportError(BulkSinkError):
    """Network or protocol failure talking to the backend."""

    default_category = ErrorCategory.NETWORK
    default_severity = ErrorSeverity.HIGH
    default_recovery = ErrorRecoveryStrategy.RETRY


class SubmissionCancelledError(TransportError):
    """The caller's deadline expired while a bulk request was in flight."""


class BulkResponseError(BulkSinkError):
    """The backend accepted the request but rejected one or more documents."""

    default_category = ErrorCategory.BACKEND
    default_severity = ErrorSeverity.HIGH
    default_recovery = ErrorRecoveryStrategy.RETRY

    def __init__(self, message: str, *, raw_response: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.raw_response = raw_response

    def __str__(self) -> str:
        return f"{self.message}: {self.raw_response}"


__all__ = [
    "BulkResponseError",
    "BulkSinkError",
    "ConfigurationError",
    "DocumentIdRenderError",
    "EmptyBatchError",
    "EncodeError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorRecoveryStrategy",
    "ErrorSeverity",
    "PatternRenderError",
    "RenderError",
    "SubmissionCancelledError",
    "TransportError",
    "create_error_context",
]
