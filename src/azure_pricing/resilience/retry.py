"""
Retry policy and backoff strategies.

Decision functions used by the retry engine:
- check_retry: retry network errors, 429 and 503; never retry past a
  cancelled or expired request context
- retry_after_backoff: honour the server's Retry-After hint, falling back
  to bounded exponential backoff

Both are pure functions of their inputs and never log.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from azure_pricing.context import RequestContext
from azure_pricing.types import BackoffStrategy, HttpResponseLike, RetryPolicy

RETRYABLE_STATUSES = frozenset({429, 503})

DEFAULT_RETRY_MAX = 3
DEFAULT_RETRY_WAIT_MIN = 1.0
DEFAULT_RETRY_WAIT_MAX = 30.0

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def check_retry(
    ctx: RequestContext,
    response: HttpResponseLike | None,
    error: BaseException | None,
) -> tuple[bool, BaseException | None]:
    """
    Decide whether an attempt should be retried.

    Rules, in order:
        1. Context cancelled or past its deadline: no retry, return the
           context error as-is
        2. Transport failure (no response): retry
        3. 429 Too Many Requests or 503 Service Unavailable: retry
        4. Anything else, including success: no retry

    Returns:
        (retry, error) where error is only set by rule 1
    """
    ctx_err = ctx.err()
    if ctx_err is not None:
        return False, ctx_err

    # The transport error itself is not returned; it is retried or the
    # engine reports exhaustion.
    if error is not None:
        return True, None

    if response is not None and response.status in RETRYABLE_STATUSES:
        return True, None

    return False, None


def parse_retry_after(response: HttpResponseLike | None, now: datetime | None = None) -> float:
    """
    Parse the Retry-After header into seconds.

    Supports both RFC 7231 forms:
        - delay-seconds: "120" -> 120.0
        - HTTP-date: "Wed, 21 Oct 2015 07:28:00 GMT" -> seconds until then

    Returns 0.0 when the header is missing, not an integer or date (e.g.
    "5.5"), non-positive, or a date in the past.
    """
    if response is None:
        return 0.0

    header = response.headers.get("Retry-After")
    if not header:
        return 0.0
    header = header.strip()

    if _INTEGER_PATTERN.fullmatch(header):
        seconds = int(header)
        return float(seconds) if seconds > 0 else 0.0

    try:
        retry_at = parsedate_to_datetime(header)
    except (TypeError, ValueError, IndexError):
        return 0.0
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=UTC)

    now = now or datetime.now(UTC)
    delay = (retry_at - now).total_seconds()
    return delay if delay > 0 else 0.0


def exponential_backoff(
    min_wait: float,
    max_wait: float,
    attempt: int,
    response: HttpResponseLike | None = None,
) -> float:
    """
    Exponential backoff bounded by [min_wait, max_wait].

    attempt is 0-indexed: the first retry waits min_wait, then 2x, 4x, ...
    """
    try:
        delay = min_wait * math.pow(2, attempt)
    except OverflowError:
        return max_wait
    return min(delay, max_wait)


def retry_after_backoff(
    min_wait: float,
    max_wait: float,
    attempt: int,
    response: HttpResponseLike | None = None,
) -> float:
    """
    Prefer the server's Retry-After hint (capped at max_wait), otherwise
    fall back to exponential backoff.
    """
    retry_after = parse_retry_after(response)
    if retry_after > 0:
        return min(retry_after, max_wait)
    return exponential_backoff(min_wait, max_wait, attempt, response)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    # Retries after the first attempt (total attempts = retry_max + 1)
    retry_max: int = DEFAULT_RETRY_MAX
    wait_min: float = DEFAULT_RETRY_WAIT_MIN
    wait_max: float = DEFAULT_RETRY_WAIT_MAX

    check_retry: RetryPolicy = field(default=check_retry)
    backoff: BackoffStrategy = field(default=retry_after_backoff)

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.retry_max = int(self.retry_max)
        self.wait_min = float(self.wait_min)
        self.wait_max = float(self.wait_max)

    @property
    def max_attempts(self) -> int:
        return self.retry_max + 1

    def get_delay(self, attempt: int, response: HttpResponseLike | None = None) -> float:
        """
        Delay in seconds before retry number ``attempt`` (0-indexed).

        Never negative, whatever the configured strategy returns.
        """
        return max(0.0, self.backoff(self.wait_min, self.wait_max, attempt, response))

    def delay_source(self, response: HttpResponseLike | None) -> str:
        """Where the delay for this response comes from, for log fields."""
        if self.backoff is retry_after_backoff and parse_retry_after(response) > 0:
            return "server"
        if self.backoff in (retry_after_backoff, exponential_backoff):
            return "exponential_backoff"
        return "custom"


DEFAULT_RETRY = RetryConfig()


__all__ = [
    "DEFAULT_RETRY",
    "RETRYABLE_STATUSES",
    "RetryConfig",
    "check_retry",
    "exponential_backoff",
    "parse_retry_after",
    "retry_after_backoff",
]
