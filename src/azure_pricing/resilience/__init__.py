"""
Resilience patterns for the pricing client.

Provides:
- Retry policy (which outcomes are worth another attempt)
- Backoff strategies (Retry-After aware, bounded exponential)
- RetryTransport (the retry engine over a pooled aiohttp session)
"""

from azure_pricing.resilience.retry import (
    DEFAULT_RETRY,
    RETRYABLE_STATUSES,
    RetryConfig,
    check_retry,
    exponential_backoff,
    parse_retry_after,
    retry_after_backoff,
)
from azure_pricing.resilience.transport import (
    TRANSPORT_ERRORS,
    RetryTransport,
    create_session,
)

__all__ = [
    # Retry policy and backoff
    "DEFAULT_RETRY",
    "RETRYABLE_STATUSES",
    "RetryConfig",
    "check_retry",
    "exponential_backoff",
    "parse_retry_after",
    "retry_after_backoff",
    # Transport
    "TRANSPORT_ERRORS",
    "RetryTransport",
    "create_session",
]
