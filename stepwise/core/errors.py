"""Error Hierarchy — typed, categorized exceptions for all pipeline failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller errors (400-level) never reach an oracle; oracle errors are 500-level
    - to_response() produces the REST envelope used by routes and global handlers
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with StepwiseError base: the controller boundary and the
      FastAPI global handler both catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    EXTERNAL_API = "external_api"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    submission_id: str | None = None
    step_index: int | None = None
    oracle: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class StepwiseError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "submission_id": self.context.submission_id,
                    "step_index": self.context.step_index,
                    "oracle": self.context.oracle,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Caller Errors (400-level) ──────────────────────────────────

class ValidationError(StepwiseError):
    """Malformed input — surfaced before any oracle call."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class StaleSessionError(StepwiseError):
    """advance/progress referencing an unknown or expired submission."""
    def __init__(self, submission_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.submission_id = submission_id
        super().__init__(
            f"Stale or unknown session '{submission_id}'. Submit the question again.",
            "STALE_SESSION", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


class SessionClosedError(StepwiseError):
    """advance on a submission already in a terminal state."""
    def __init__(
        self, submission_id: str, status: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.submission_id = submission_id
        super().__init__(
            f"Submission '{submission_id}' is already {status}; no further steps.",
            "SESSION_CLOSED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.status = status


# ─── Pipeline Errors (500-level) ────────────────────────────────

class OracleError(StepwiseError):
    """An external oracle call failed at the transport level."""
    def __init__(
        self,
        message: str,
        oracle_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Oracle error ({oracle_error_type}): {message}",
            "ORACLE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.oracle_error_type = oracle_error_type


class GenerationFailure(StepwiseError):
    """Generation oracle produced no usable steps. No cache entry is created."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Could not generate a solution: {message}",
            "GENERATION_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )


class VerificationFailure(StepwiseError):
    """Verification oracle failed. Delivered steps stay valid."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Could not verify the solution: {message}",
            "VERIFICATION_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )


class InternalPipelineError(StepwiseError):
    """Unexpected failure converted at the controller boundary."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "An unexpected error occurred while solving. Please try again.",
            "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
