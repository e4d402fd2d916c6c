"""
HTTP transport with retries, using aiohttp.

Executes one request at a time, retrying according to a RetryConfig:
transport failures, 429 and 503 are retried with backoff; every request
and every backoff wait races the caller's RequestContext.

The session is shared and safe for concurrent use; the transport itself
keeps no per-request state.
"""

import logging

import aiohttp
from yarl import URL

from azure_pricing.context import RequestContext
from azure_pricing.errors.exceptions import RequestFailedError
from azure_pricing.resilience.retry import DEFAULT_RETRY, RetryConfig

logger = logging.getLogger(__name__)

# Connection pool tuned for a single upstream host
DEFAULT_MAX_CONNECTIONS = 100
DEFAULT_MAX_CONNECTIONS_PER_HOST = 10
DEFAULT_KEEPALIVE_TIMEOUT = 90

TRANSPORT_ERRORS = (aiohttp.ClientError, TimeoutError, OSError)


def create_session(
    max_connections: int = DEFAULT_MAX_CONNECTIONS,
    max_connections_per_host: int = DEFAULT_MAX_CONNECTIONS_PER_HOST,
    keepalive_timeout: float = DEFAULT_KEEPALIVE_TIMEOUT,
) -> aiohttp.ClientSession:
    """
    Create aiohttp ClientSession with connection pooling for the pricing API.

    Args:
        max_connections: Total connection pool size (default: 100)
        max_connections_per_host: Per-host connection limit (default: 10)
        keepalive_timeout: Seconds an idle pooled connection is kept (default: 90)

    Returns:
        Configured aiohttp.ClientSession

    Note:
        Caller is responsible for session lifecycle management. Must be
        called with a running event loop.
    """
    connector = aiohttp.TCPConnector(
        limit=max_connections,
        limit_per_host=max_connections_per_host,
        keepalive_timeout=keepalive_timeout,
        ttl_dns_cache=300,
        enable_cleanup_closed=True,
    )
    return aiohttp.ClientSession(connector=connector)


class RetryTransport:
    """Executes GET requests with retry, backoff and context cancellation."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        retry: RetryConfig | None = None,
        timeout: float = 60.0,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.session = session
        self.retry = retry or DEFAULT_RETRY
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._log = log or logger

    async def execute(
        self,
        ctx: RequestContext,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> aiohttp.ClientResponse:
        """
        Issue a GET, retrying per the configured policy.

        Returns the first response the policy accepts, or the last response
        once retries are exhausted (so the caller classifies by final status).
        The caller must release the returned response.

        Raises:
            ContextCancelled / DeadlineExceeded: The request context ended
            RequestFailedError: Every attempt failed without a response
        """
        attempt = 0
        while True:
            # Never issue a request for an already-finished context
            ctx_err = ctx.err()
            if ctx_err is not None:
                raise ctx_err

            response: aiohttp.ClientResponse | None = None
            error: BaseException | None = None
            try:
                response = await ctx.run(self._send(url, headers))
            except TRANSPORT_ERRORS as e:
                error = e

            retry, policy_err = self.retry.check_retry(ctx, response, error)
            if policy_err is not None:
                _release(response)
                raise policy_err

            if not retry:
                if error is not None:
                    raise RequestFailedError(
                        f"GET {url}: {error}", cause=error
                    ) from error
                return response

            if attempt >= self.retry.retry_max:
                if response is not None:
                    return response
                raise RequestFailedError(
                    f"GET {url} giving up after {attempt + 1} attempt(s)",
                    cause=error,
                ) from error

            delay = self.retry.get_delay(attempt, response)
            self._log_retry(url, attempt, delay, response, error)
            _release(response)

            await ctx.sleep(delay)
            attempt += 1

    async def _send(
        self, url: str, headers: dict[str, str] | None
    ) -> aiohttp.ClientResponse:
        # encoded=True keeps next-page links byte-for-byte
        return await self.session.request(
            "GET",
            URL(url, encoded=True),
            headers=headers,
            timeout=self.timeout,
        )

    def _log_retry(
        self,
        url: str,
        attempt: int,
        delay: float,
        response: aiohttp.ClientResponse | None,
        error: BaseException | None,
    ) -> None:
        log_extras: dict[str, object] = {
            "url": url,
            "attempt": attempt + 1,
            "max_attempts": self.retry.max_attempts,
            "delay_seconds": round(delay, 2),
            "delay_source": self.retry.delay_source(response),
        }
        if response is not None:
            log_extras["http_status"] = response.status
            reason = f"status {response.status}"
        else:
            log_extras["error_message"] = str(error)[:200]
            reason = type(error).__name__

        self._log.warning(
            "Retryable failure (%s), will retry in %.2fs", reason, delay, extra=log_extras
        )


def _release(response: aiohttp.ClientResponse | None) -> None:
    if response is not None:
        response.release()


__all__ = [
    "RetryTransport",
    "TRANSPORT_ERRORS",
    "create_session",
]
