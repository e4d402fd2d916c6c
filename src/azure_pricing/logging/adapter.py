"""
Logger adapter used by the client.

The client never configures logging itself. Callers inject a stdlib Logger
or LoggerAdapter through ClientConfig; when none is given everything is
discarded.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

from azure_pricing.logging.context import get_log_context

NOP_LOGGER_NAME = "azure_pricing.nop"


class PricingLogAdapter(logging.LoggerAdapter):
    """
    LoggerAdapter that merges bound fields, log context and per-call extras.

    Precedence (lowest to highest): fields bound at construction, non-empty
    context variables (trace_id, operation), the call's own ``extra``.

    Example:
        log = PricingLogAdapter(logging.getLogger("pricing"), {"component": "cli"})
        log.warning("Retrying", extra={"attempt": 2})
    """

    def __init__(self, logger: logging.Logger, extra: dict[str, Any] | None = None):
        super().__init__(logger, extra or {})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        context = {k: v for k, v in get_log_context().items() if v}
        kwargs["extra"] = {**self.extra, **context, **(kwargs.get("extra") or {})}
        return msg, kwargs

    def bind(self, **fields: Any) -> "PricingLogAdapter":
        """Return a new adapter with additional bound fields."""
        return PricingLogAdapter(self.logger, {**self.extra, **fields})


def get_nop_logger() -> PricingLogAdapter:
    """Adapter over a disabled logger: every record is dropped."""
    nop = logging.getLogger(NOP_LOGGER_NAME)
    if not nop.handlers:
        nop.addHandler(logging.NullHandler())
    nop.propagate = False
    nop.disabled = True
    return PricingLogAdapter(nop)


def adapt_logger(
    logger: logging.Logger | logging.LoggerAdapter | None,
) -> logging.Logger | logging.LoggerAdapter:
    """
    Normalize an injected logger.

    None becomes the no-op logger, a plain Logger is wrapped in a
    PricingLogAdapter, and an existing adapter is used unchanged so its
    own extras are kept.
    """
    if logger is None:
        return get_nop_logger()
    if isinstance(logger, logging.LoggerAdapter):
        return logger
    return PricingLogAdapter(logger)
