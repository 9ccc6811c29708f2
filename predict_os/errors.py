"""
Error taxonomy for PredictOS.

Every error carries ``retryable``, ``error_code`` and ``http_status`` so the
analysis gateway can decide whether to retry and the outer surfaces can
render a single structured payload.
"""

from __future__ import annotations

import logging

__all__ = [
    "PredictOSError",
    "ValidationError",
    "NotFoundError",
    "RateLimitError",
    "ExternalApiError",
    "UpstreamTimeoutError",
    "InternalError",
    "error_payload",
]

logger = logging.getLogger(__name__)


class PredictOSError(Exception):
    """Root exception.

    Attributes:
        retryable: If True, the caller may retry the operation.
        error_code: Machine-readable code for logs and clients.
        http_status: Status classification for API responses.
    """

    retryable: bool = False
    error_code: str = "PREDICT_OS_ERROR"
    http_status: int = 500

    def __init__(self, message: str, *, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_payload(self) -> dict:
        """Serialize for API responses."""
        return {"error": self.message, "status": self.http_status}

    def to_dict(self) -> dict:
        """Serialize for structured logging."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "detail": self.detail,
            "retryable": self.retryable,
            "http_status": self.http_status,
        }


class ValidationError(PredictOSError):
    """Caller input is malformed (empty identifier, bad bankroll, …)."""

    error_code = "VALIDATION_ERROR"
    http_status = 400


class NotFoundError(PredictOSError):
    """Requested market or resource does not exist upstream."""

    error_code = "NOT_FOUND"
    http_status = 404


class RateLimitError(PredictOSError):
    """Upstream returned HTTP 429."""

    retryable = True
    error_code = "RATE_LIMITED"
    http_status = 429

    def __init__(self, message: str = "Rate limit exceeded", *, detail: str | None = None):
        super().__init__(message, detail=detail)


class ExternalApiError(PredictOSError):
    """Upstream non-success status, malformed body, or network failure."""

    retryable = True
    error_code = "EXTERNAL_API_ERROR"
    http_status = 502


class UpstreamTimeoutError(PredictOSError):
    """Upstream call exceeded its timeout bound."""

    retryable = True
    error_code = "UPSTREAM_TIMEOUT"
    http_status = 504


class InternalError(PredictOSError):
    """Unexpected invariant violation."""

    error_code = "INTERNAL_ERROR"
    http_status = 500


def error_payload(exc: BaseException) -> dict:
    """Map any exception to the ``{"error", "status"}`` payload.

    Unknown exceptions are logged with their traceback and reported as a
    generic internal error.
    """
    if isinstance(exc, (ExternalApiError, UpstreamTimeoutError, RateLimitError)):
        logger.warning("Upstream error [%s]: %s", exc.error_code, exc.message)
        return exc.to_payload()
    if isinstance(exc, InternalError):
        logger.error("Internal error: %s", exc.message)
        return exc.to_payload()
    if isinstance(exc, PredictOSError):
        return exc.to_payload()

    logger.exception("Unhandled error: %s", exc)
    return InternalError("Internal server error").to_payload()
