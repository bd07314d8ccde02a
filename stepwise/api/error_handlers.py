"""Error Handlers — global exception handlers for the Stepwise API.

Invariants:
    - StepwiseError → structured JSON with error code, message, severity;
      ValidationError adds the offending field, rate limits add Retry-After
    - RequestValidationError → field-level error details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Three-layer handler: domain (StepwiseError), validation (Pydantic), catch-all (Exception)
    - Kept out of main.py so the app factory stays short
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from stepwise.core.errors import ErrorSeverity, StepwiseError, ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_stepwise_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_stepwise_error_handler(app: FastAPI) -> None:
    """Register submission pipeline error handler."""

    @app.exception_handler(StepwiseError)
    async def stepwise_error_handler(request: Request, exc: StepwiseError):
        """Handle all pipeline domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"StepwiseError: {exc.message}",
            extra={
                "error_code": exc.code,
                "submission_id": exc.context.submission_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=_build_stepwise_error_response(exc),
            headers=_retry_after_header(exc),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_stepwise_error_response(exc: StepwiseError) -> dict:
    """Domain envelope; caller-input errors also name the offending field."""
    body = exc.to_response()
    if isinstance(exc, ValidationError):
        body["error"]["details"] = [
            {"field": exc.field, "message": exc.message, "type": "value_error"},
        ]
    return body


def _retry_after_header(exc: StepwiseError) -> dict[str, str] | None:
    """Retry-After (seconds, rounded up) when the oracle told us to back off."""
    retry_after_ms = exc.context.retry_after_ms
    if not retry_after_ms:
        return None
    return {"Retry-After": str(math.ceil(retry_after_ms / 1000))}


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
