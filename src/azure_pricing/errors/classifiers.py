"""
Centralized error classification for the pricing client.

Turns raw HTTP outcomes into typed PricingError instances and maps errors
onto the values other layers need:
- error_category(): category string for structured logs
- log_level_for(): log severity for terminal failures
- map_to_status(): remote-call status code for a service layer
"""

import logging

from azure_pricing.context import ContextCancelled, DeadlineExceeded
from azure_pricing.errors.exceptions import (
    HttpStatusError,
    NotFoundError,
    PricingError,
    RateLimitedError,
    RequestFailedError,
    ServiceUnavailableError,
    is_kind,
)
from azure_pricing.types import ErrorKind, StatusCode

# status -> exception class for statuses with a dedicated kind
_STATUS_MAP: dict[int, type[PricingError]] = {
    404: NotFoundError,
    429: RateLimitedError,
    503: ServiceUnavailableError,
}

# Evaluated in order; first match wins
_LOG_LEVELS: tuple[tuple[ErrorKind, int], ...] = (
    (ErrorKind.NOT_FOUND, logging.DEBUG),
    (ErrorKind.RATE_LIMITED, logging.WARNING),
    (ErrorKind.SERVICE_UNAVAILABLE, logging.ERROR),
    (ErrorKind.INVALID_RESPONSE, logging.ERROR),
    (ErrorKind.PAGINATION_LIMIT_EXCEEDED, logging.ERROR),
)

_STATUS_CODES: tuple[tuple[ErrorKind, StatusCode], ...] = (
    (ErrorKind.NOT_FOUND, StatusCode.NOT_FOUND),
    (ErrorKind.RATE_LIMITED, StatusCode.RESOURCE_EXHAUSTED),
    (ErrorKind.SERVICE_UNAVAILABLE, StatusCode.UNAVAILABLE),
)


def classify_http_status(status: int, snippet: str = "") -> PricingError:
    """
    Classify a non-2xx status into the matching PricingError.

    404 -> NotFoundError, 429 -> RateLimitedError, 503 -> ServiceUnavailableError,
    anything else -> RequestFailedError carrying the status code.
    """
    message = f"status {status}: {snippet}"
    error_class = _STATUS_MAP.get(status)
    if error_class is NotFoundError:
        return NotFoundError(message, context={"status_code": status, "snippet": snippet})
    if error_class is not None:
        return error_class(message, status_code=status, snippet=snippet)
    return RequestFailedError(message, status_code=status, snippet=snippet)


def error_category(exc: BaseException) -> str:
    """Category string used in the ``error_category`` log field."""
    for kind in ErrorKind:
        if is_kind(exc, kind):
            return kind.value
    return "unknown"


def _status_class(exc: BaseException) -> int | None:
    """Leading digit of the HTTP status carried by the error, if any."""
    while exc is not None:
        if isinstance(exc, HttpStatusError) and exc.status_code is not None:
            return exc.status_code // 100
        exc = getattr(exc, "cause", None) or exc.__cause__
    return None


def log_level_for(exc: BaseException) -> int:
    """
    Log severity for a terminal client failure.

    RequestFailed is sub-classified by status class: 4xx -> WARNING,
    5xx -> ERROR, no HTTP status (network, exhaustion) -> DEBUG.
    Cancellation, deadlines and unknown errors log at DEBUG.
    """
    for kind, level in _LOG_LEVELS:
        if is_kind(exc, kind):
            return level

    if is_kind(exc, ErrorKind.REQUEST_FAILED):
        status_class = _status_class(exc)
        if status_class == 4:
            return logging.WARNING
        if status_class == 5:
            return logging.ERROR

    return logging.DEBUG


def map_to_status(exc: BaseException | None) -> StatusCode:
    """
    Map an error onto a remote-call status code.

    Priority: cancelled, deadline exceeded, not found, rate limited,
    unavailable; every other failure is INTERNAL.
    """
    if exc is None:
        return StatusCode.OK
    if isinstance(exc, ContextCancelled):
        return StatusCode.CANCELLED
    if isinstance(exc, DeadlineExceeded):
        return StatusCode.DEADLINE_EXCEEDED
    for kind, code in _STATUS_CODES:
        if is_kind(exc, kind):
            return code
    return StatusCode.INTERNAL


__all__ = [
    "classify_http_status",
    "error_category",
    "log_level_for",
    "map_to_status",
]
