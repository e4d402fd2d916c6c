"""
Structured logging module.

Provides JSON and console formatting, trace-id context propagation and the
logger adapter the client logs through.
"""

from azure_pricing.logging.adapter import (
    PricingLogAdapter,
    adapt_logger,
    get_nop_logger,
)
from azure_pricing.logging.context import (
    MAX_TRACE_ID_LENGTH,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from azure_pricing.logging.formatters import ConsoleFormatter, JSONFormatter
from azure_pricing.logging.setup import setup_logging

__all__ = [
    # Setup
    "setup_logging",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "MAX_TRACE_ID_LENGTH",
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    # Adapter
    "PricingLogAdapter",
    "adapt_logger",
    "get_nop_logger",
]
