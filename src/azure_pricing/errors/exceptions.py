"""
Exception hierarchy for the pricing client.

Every failure surfaced by the client is a PricingError subclass carrying an
ErrorKind, so callers can branch programmatically:

    try:
        items = await client.get_prices(query)
    except NotFoundError:
        ...
    except PricingError as e:
        if e.kind is ErrorKind.RATE_LIMITED:
            ...

Cancellation and deadline errors from the request context are NOT part of
this hierarchy; they propagate unchanged.
"""

from azure_pricing.types import ErrorKind


class PricingError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error description
        kind: Error classification from the closed taxonomy
        cause: Original exception if wrapping
        context: Additional context dict for debugging
        query_context: Formatted query fields, set when the error leaves get_prices
        page: Zero-based page index of a mid-pagination failure
    """

    kind: ErrorKind = ErrorKind.REQUEST_FAILED

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        self.query_context: str | None = None
        self.page: int | None = None
        super().__init__(message)

    def annotate(self, query_context: str, page: int | None = None) -> "PricingError":
        """Attach query context (and page index) for diagnostics. Returns self."""
        self.query_context = query_context
        self.page = page
        self.context["query"] = query_context
        if page is not None:
            self.context["page"] = page
        return self

    def __str__(self) -> str:
        detail = f"{self.kind.label}: {self.message}"
        if self.query_context is not None:
            where = self.query_context
            if self.page is not None:
                where = f"{where} page {self.page}"
            detail = f"{where}: {detail}"
        parts = [detail]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class InvalidConfigError(PricingError):
    """Client configuration failed validation."""

    kind = ErrorKind.INVALID_CONFIG


class NotFoundError(PricingError):
    """HTTP 404, or no pricing data matched the query."""

    kind = ErrorKind.NOT_FOUND


class HttpStatusError(PricingError):
    """Error derived from a non-2xx response, with a bounded body snippet."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        snippet: str = "",
        cause: BaseException | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.status_code = status_code
        self.snippet = snippet


class RateLimitedError(HttpStatusError):
    """Final response was 429 Too Many Requests."""

    kind = ErrorKind.RATE_LIMITED


class ServiceUnavailableError(HttpStatusError):
    """Final response was 503 Service Unavailable."""

    kind = ErrorKind.SERVICE_UNAVAILABLE


class RequestFailedError(HttpStatusError):
    """Network failure, retry exhaustion, or an unclassified non-2xx status."""

    kind = ErrorKind.REQUEST_FAILED


class InvalidResponseError(PricingError):
    """Response body could not be read or parsed as a price page."""

    kind = ErrorKind.INVALID_RESPONSE

    def __init__(
        self,
        message: str,
        snippet: str = "",
        cause: BaseException | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.snippet = snippet


class PaginationLimitExceededError(PricingError):
    """Page safety limit reached while the API still reported more pages."""

    kind = ErrorKind.PAGINATION_LIMIT_EXCEEDED


def is_kind(exc: BaseException | None, kind: ErrorKind) -> bool:
    """Check whether an exception (or anything it wraps) has the given kind."""
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, PricingError) and exc.kind is kind:
            return True
        seen.add(id(exc))
        exc = getattr(exc, "cause", None) or exc.__cause__
    return False
