"""
Error classification and exception hierarchy.

Provides:
- ErrorKind enum for the closed failure taxonomy
- PricingError hierarchy for typed exceptions
- Classification utilities for HTTP outcomes, log severity and status codes
"""

from azure_pricing.errors.classifiers import (
    classify_http_status,
    error_category,
    log_level_for,
    map_to_status,
)
from azure_pricing.errors.exceptions import (
    HttpStatusError,
    InvalidConfigError,
    InvalidResponseError,
    NotFoundError,
    PaginationLimitExceededError,
    PricingError,
    RateLimitedError,
    RequestFailedError,
    ServiceUnavailableError,
    is_kind,
)
from azure_pricing.types import ErrorKind, StatusCode

__all__ = [
    # Enums
    "ErrorKind",
    "StatusCode",
    # Base classes
    "PricingError",
    "HttpStatusError",
    # Taxonomy
    "InvalidConfigError",
    "NotFoundError",
    "RateLimitedError",
    "ServiceUnavailableError",
    "InvalidResponseError",
    "PaginationLimitExceededError",
    "RequestFailedError",
    # Classification utilities
    "is_kind",
    "classify_http_status",
    "error_category",
    "log_level_for",
    "map_to_status",
]
