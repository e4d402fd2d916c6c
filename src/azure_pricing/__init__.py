"""
Azure Retail Prices client: resilient access to a paginated, rate-limited API.

Modules:
    client      - AzurePricingClient, query/response models, OData filters
    resilience  - Retry policy, Retry-After aware backoff, retry transport
    errors      - Closed error taxonomy, classification and status mapping
    logging     - Structured JSON/console logging with trace-id context
    context     - RequestContext cancellation and deadline propagation
    config      - ClientConfig and YAML loading

Usage:
    from azure_pricing import AzurePricingClient, ClientConfig, PriceQuery

    async with AzurePricingClient(ClientConfig()) as client:
        items = await client.get_prices(PriceQuery(region="eastus", sku="Standard_B1s"))
"""

from azure_pricing.client import AzurePricingClient, PriceItem, PriceQuery, PriceResponse
from azure_pricing.config import ClientConfig, load_config
from azure_pricing.context import ContextCancelled, DeadlineExceeded, RequestContext
from azure_pricing.errors import (
    ErrorKind,
    InvalidConfigError,
    InvalidResponseError,
    NotFoundError,
    PaginationLimitExceededError,
    PricingError,
    RateLimitedError,
    RequestFailedError,
    ServiceUnavailableError,
    StatusCode,
    is_kind,
    map_to_status,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "AzurePricingClient",
    "ClientConfig",
    "load_config",
    "PriceQuery",
    "PriceItem",
    "PriceResponse",
    # Context
    "RequestContext",
    "ContextCancelled",
    "DeadlineExceeded",
    # Errors
    "ErrorKind",
    "StatusCode",
    "PricingError",
    "InvalidConfigError",
    "NotFoundError",
    "RateLimitedError",
    "ServiceUnavailableError",
    "InvalidResponseError",
    "PaginationLimitExceededError",
    "RequestFailedError",
    "is_kind",
    "map_to_status",
]
