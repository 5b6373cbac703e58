"""Typed failures raised by the generation pipeline.

Every outcome that reaches the HTTP layer is an :class:`AppError` carrying an
HTTP status and a stable machine-readable ``code``.  The two executor-level
errors at the bottom are raised inside a single attempt and are classified as
retryable by :func:`quizgen.retry.is_retryable`.
"""
from __future__ import annotations


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> dict:
        return {"error": self.status, "code": self.code, "message": self.message}


class PreconditionError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ContentUnavailableError(AppError):
    """The content store itself cannot be read."""

    status_code = 500
    code = "CONTENT_UNAVAILABLE"


class UpstreamError(AppError):
    """The generation call failed with a non-retryable error."""

    status_code = 502
    code = "UPSTREAM_ERROR"


class ParseEmptyError(AppError):
    """The generation call succeeded but no question could be parsed."""

    status_code = 502
    code = "NO_PARSEABLE_OUTPUT"


class ServiceUnavailableError(AppError):
    """Retryable upstream failures persisted past the retry budget."""

    status_code = 503
    code = "SERVICE_UNAVAILABLE"


class RateLimitedError(ServiceUnavailableError):
    status_code = 429
    code = "RATE_LIMITED"


class GenerationTimeoutError(ServiceUnavailableError):
    status_code = 504
    code = "GENERATION_TIMEOUT"


class OperationTimeoutError(TimeoutError):
    def __init__(self, timeout_ms: int):
        super().__init__(f"Operation timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class AbortedError(Exception):
    """The operation was aborted before it produced a result."""
