"""
Azure Retail Prices API client.

Provides:
- AzurePricingClient (page fetcher and pagination driver)
- PriceQuery, PriceItem, PriceResponse models
- OData filter helpers
"""

from azure_pricing.client.api_client import AzurePricingClient
from azure_pricing.client.filters import (
    build_filter_query,
    build_request_url,
    escape_odata_string,
    format_query_context,
)
from azure_pricing.client.models import PriceItem, PriceQuery, PriceResponse

__all__ = [
    "AzurePricingClient",
    "PriceItem",
    "PriceQuery",
    "PriceResponse",
    "build_filter_query",
    "build_request_url",
    "escape_odata_string",
    "format_query_context",
]
