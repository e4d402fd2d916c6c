"""
Core types and protocols used across modules.

This module provides the error taxonomy, status codes, and protocol
definitions shared by the client, the retry engine and the error layer.
"""

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from azure_pricing.context import RequestContext


class ErrorKind(Enum):
    """
    Closed set of semantic failure categories surfaced by the client.

    Every PricingError carries exactly one kind. Callers branch on the kind
    (or the matching exception class) instead of parsing messages.

    Kinds:
        INVALID_CONFIG: Client configuration failed validation at construction
        NOT_FOUND: HTTP 404, or a fully paginated fetch that yielded no items
        RATE_LIMITED: Final response was HTTP 429
        SERVICE_UNAVAILABLE: Final response was HTTP 503
        INVALID_RESPONSE: Response body could not be parsed as a price page
        PAGINATION_LIMIT_EXCEEDED: Page safety limit hit with more pages pending
        REQUEST_FAILED: Network failure, retry exhaustion, or any other non-2xx
    """

    INVALID_CONFIG = "invalid_config"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_RESPONSE = "invalid_response"
    PAGINATION_LIMIT_EXCEEDED = "pagination_limit_exceeded"
    REQUEST_FAILED = "request_failed"

    @property
    def label(self) -> str:
        """Human-readable label used when rendering error messages."""
        return self.value.replace("_", " ")


class StatusCode(Enum):
    """
    Remote-call status codes that client errors map onto.

    Names follow the gRPC canonical codes so a service layer can translate
    them one-to-one.
    """

    OK = 0
    CANCELLED = 1
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    RESOURCE_EXHAUSTED = 8
    INTERNAL = 13
    UNAVAILABLE = 14


class HttpResponseLike(Protocol):
    """Minimal view of an HTTP response used by retry and backoff decisions."""

    status: int
    headers: Mapping[str, str]


class RetryPolicy(Protocol):
    """
    Decide whether an attempt should be retried.

    Returns (retry, error). A non-None error aborts the retry loop and is
    raised as-is.
    """

    def __call__(
        self,
        ctx: "RequestContext",
        response: HttpResponseLike | None,
        error: BaseException | None,
    ) -> tuple[bool, BaseException | None]: ...


class BackoffStrategy(Protocol):
    """Compute the wait in seconds before retry number ``attempt`` (0-indexed)."""

    def __call__(
        self,
        min_wait: float,
        max_wait: float,
        attempt: int,
        response: HttpResponseLike | None,
    ) -> float: ...


__all__ = [
    "BackoffStrategy",
    "ErrorKind",
    "HttpResponseLike",
    "RetryPolicy",
    "StatusCode",
]
