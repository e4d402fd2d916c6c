"""
OData filter construction for pricing queries.

Field order is fixed (region, sku, service, product, currency) so that the
same query always produces the same URL.
"""

from urllib.parse import quote_plus

from azure_pricing.client.models import PriceQuery

# (query attribute, OData field, query-context label)
_FILTER_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("region", "armRegionName", "region"),
    ("sku", "armSkuName", "sku"),
    ("service", "serviceName", "service"),
    ("product", "productName", "product"),
    ("currency", "currencyCode", "currency"),
)


def escape_odata_string(value: str) -> str:
    """Escape a string literal for an OData filter by doubling single quotes."""
    return value.replace("'", "''")


def build_filter_query(query: PriceQuery) -> str:
    """
    Build the OData $filter expression for a query.

    Returns an empty string when no field is set.

    Example:
        >>> build_filter_query(PriceQuery(region="eastus", sku="Standard_B1s"))
        "armRegionName eq 'eastus' and armSkuName eq 'Standard_B1s'"
    """
    clauses = []
    for attr, odata_field, _ in _FILTER_FIELDS:
        value = getattr(query, attr)
        if value:
            clauses.append(f"{odata_field} eq '{escape_odata_string(value)}'")
    return " and ".join(clauses)


def build_request_url(base_url: str, query: PriceQuery) -> str:
    """First-page URL: base URL plus a form-encoded $filter when non-empty."""
    filter_expr = build_filter_query(query)
    if not filter_expr:
        return base_url
    return f"{base_url}?$filter={quote_plus(filter_expr)}"


def format_query_context(query: PriceQuery) -> str:
    """
    Render the query's non-empty fields for error messages.

    Example:
        >>> format_query_context(PriceQuery(region="eastus", service="Storage"))
        'query [region=eastus service=Storage]'
    """
    parts = [
        f"{label}={getattr(query, attr)}"
        for attr, _, label in _FILTER_FIELDS
        if getattr(query, attr)
    ]
    return f"query [{' '.join(parts)}]"


__all__ = [
    "build_filter_query",
    "build_request_url",
    "escape_odata_string",
    "format_query_context",
]
