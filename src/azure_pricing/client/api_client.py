"""Azure Retail Prices API client with retries, bounded reads and pagination."""

import asyncio
import logging
import time

import aiohttp
from pydantic import ValidationError

from azure_pricing.client.filters import build_request_url, format_query_context
from azure_pricing.client.models import PriceItem, PriceQuery, PriceResponse
from azure_pricing.config import ClientConfig
from azure_pricing.context import (
    ContextCancelled,
    DeadlineExceeded,
    RequestContext,
    background,
)
from azure_pricing.errors.classifiers import (
    classify_http_status,
    error_category,
    log_level_for,
)
from azure_pricing.errors.exceptions import (
    InvalidResponseError,
    NotFoundError,
    PaginationLimitExceededError,
    PricingError,
)
from azure_pricing.logging.adapter import adapt_logger
from azure_pricing.resilience.transport import (
    TRANSPORT_ERRORS,
    RetryTransport,
    create_session,
)
from azure_pricing.types import BackoffStrategy, RetryPolicy

logger = logging.getLogger(__name__)

# Success bodies larger than this are rejected rather than buffered
MAX_RESPONSE_BODY_BYTES = 10 * 1024 * 1024
# Error bodies and unparsable bodies are quoted up to this many bytes
MAX_SNIPPET_BYTES = 256
READ_CHUNK_BYTES = 64 * 1024

CONTEXT_ERRORS = (ContextCancelled, DeadlineExceeded)


async def _read_bounded(response: aiohttp.ClientResponse, limit: int) -> bytes:
    """Read at most ``limit`` bytes of the body."""
    chunks: list[bytes] = []
    total = 0
    while total < limit:
        chunk = await response.content.read(min(READ_CHUNK_BYTES, limit - total))
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
    return b"".join(chunks)


def _snippet(body: bytes) -> str:
    # A character split at the cut is dropped so the text stays within the byte bound
    return body[:MAX_SNIPPET_BYTES].decode("utf-8", errors="ignore")


class AzurePricingClient:
    """
    Async client for the Azure Retail Prices API.

    Holds no per-query state: one client (and its connection pool) can serve
    any number of concurrent get_prices calls.

    Example:
        async with AzurePricingClient(ClientConfig(logger=log)) as client:
            items = await client.get_prices(PriceQuery(region="eastus", sku="Standard_B1s"))
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        backoff: BackoffStrategy | None = None,
        check_retry: RetryPolicy | None = None,
    ):
        """
        Build a client from a validated configuration.

        Args:
            config: Client configuration (default: ClientConfig())
            session: Shared session to use instead of an owned pool; the
                client never closes an injected session
            backoff: Replacement backoff strategy
            check_retry: Replacement retry policy

        Raises:
            InvalidConfigError: The configuration failed validation
        """
        self.config = config or ClientConfig()
        self.config.validate()

        # Read once so later edits to the config cannot bypass validation
        self._base_url = self.config.base_url
        self._max_pages = self.config.max_pages
        self._timeout = self.config.timeout
        self._log = adapt_logger(self.config.logger)
        self._retry = self.config.retry_config(backoff=backoff, check_retry=check_retry)
        self._headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "application/json",
        }

        self._session = session
        self._owns_session = session is None
        self._transport: RetryTransport | None = None
        self._closed = False

        logger.debug(
            "AzurePricingClient initialized",
            extra={
                "url": self._base_url,
                "max_attempts": self._retry.max_attempts,
            },
        )

    async def __aenter__(self) -> "AzurePricingClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> RetryTransport:
        if self._closed:
            raise RuntimeError("AzurePricingClient is closed, cannot create new session")
        if self._session is None or (self._owns_session and self._session.closed):
            self._session = create_session()
            self._transport = None
        if self._transport is None:
            self._transport = RetryTransport(
                self._session,
                retry=self._retry,
                timeout=self._timeout,
                log=self._log,
            )
        return self._transport

    async def close(self) -> None:
        """Release pooled connections. Safe to call more than once."""
        self._closed = True
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            # Let the connector finish closing transports
            await asyncio.sleep(0)
        self._session = None
        self._transport = None

    async def fetch_page(self, url: str, ctx: RequestContext | None = None) -> PriceResponse:
        """
        Fetch and parse one page of results.

        Raises:
            ContextCancelled / DeadlineExceeded: The request context ended
            RateLimitedError / ServiceUnavailableError / NotFoundError /
            RequestFailedError: Non-2xx final status, network failure or
                retry exhaustion
            InvalidResponseError: The body could not be read or parsed
        """
        ctx = ctx or background()
        transport = await self._ensure_session()
        response = await transport.execute(ctx, url, headers=self._headers)
        try:
            if not 200 <= response.status < 300:
                snippet = await self._read_error_snippet(ctx, response)
                raise classify_http_status(response.status, snippet)
            body = await self._read_body(ctx, response)
        finally:
            response.release()

        try:
            return PriceResponse.model_validate_json(body)
        except ValidationError as e:
            raise InvalidResponseError(
                f"decoding response: {e.error_count()} validation error(s) "
                f"(response: {_snippet(body)})",
                snippet=_snippet(body),
                cause=e,
            ) from e

    async def _read_error_snippet(
        self, ctx: RequestContext, response: aiohttp.ClientResponse
    ) -> str:
        # The status is what matters; an unreadable error body only loses the snippet
        try:
            body = await ctx.run(_read_bounded(response, MAX_SNIPPET_BYTES))
        except CONTEXT_ERRORS:
            raise
        except TRANSPORT_ERRORS:
            return ""
        return _snippet(body)

    async def _read_body(self, ctx: RequestContext, response: aiohttp.ClientResponse) -> bytes:
        try:
            body = await ctx.run(_read_bounded(response, MAX_RESPONSE_BODY_BYTES + 1))
        except CONTEXT_ERRORS:
            raise
        except TRANSPORT_ERRORS as e:
            raise InvalidResponseError(f"reading response: {e}", cause=e) from e

        if len(body) > MAX_RESPONSE_BODY_BYTES:
            raise InvalidResponseError(
                f"response body exceeds {MAX_RESPONSE_BODY_BYTES} bytes",
                snippet=_snippet(body),
            )
        return body

    async def get_prices(
        self, query: PriceQuery, ctx: RequestContext | None = None
    ) -> list[PriceItem]:
        """
        Fetch every item matching the query, following NextPageLink.

        Items are returned in upstream order. Failures carry the query
        context and, for mid-pagination failures, the zero-based page index.

        Raises:
            NotFoundError: No item matched (or the API answered 404)
            PaginationLimitExceededError: max_pages reached with more pages pending
            PricingError: Any page failed; see fetch_page
            ContextCancelled / DeadlineExceeded: The request context ended
        """
        ctx = ctx or background()
        query_context = format_query_context(query)
        start = time.monotonic()
        url = build_request_url(self._base_url, query)

        items: list[PriceItem] = []
        page = 0
        while url and page < self._max_pages:
            try:
                result = await self.fetch_page(url, ctx)
            except PricingError as e:
                e.annotate(query_context, page)
                self._log_error(query, url, e, page)
                raise
            except CONTEXT_ERRORS as e:
                self._log_error(query, url, e, page)
                raise
            items.extend(result.items)
            url = result.next_page_link
            page += 1

        if url:
            err = PaginationLimitExceededError(
                f"more results after {page} pages",
                context={"next_page_link": url},
            ).annotate(query_context)
            self._log_error(query, url, err)
            raise err

        if not items:
            err = NotFoundError("no pricing data").annotate(query_context)
            self._log_error(query, url, err)
            raise err

        self._log.debug(
            "Fetched pricing data",
            extra={
                "items": len(items),
                "pages": page,
                "duration_ms": round((time.monotonic() - start) * 1000, 2),
                **self._query_fields(query),
            },
        )
        return items

    @staticmethod
    def _query_fields(query: PriceQuery) -> dict[str, str]:
        return {
            "region": query.region,
            "sku": query.sku,
            "service": query.service,
            "product": query.product,
            "currency": query.currency,
        }

    def _log_error(
        self,
        query: PriceQuery,
        url: str,
        err: BaseException,
        page: int | None = None,
    ) -> None:
        log_extras: dict[str, object] = {
            **self._query_fields(query),
            "url": url,
            "error_category": error_category(err),
            "error_message": str(err),
        }
        if page is not None:
            log_extras["page"] = page
        self._log.log(log_level_for(err), "pricing query error", extra=log_extras)


__all__ = [
    "AzurePricingClient",
    "MAX_RESPONSE_BODY_BYTES",
    "MAX_SNIPPET_BYTES",
]
