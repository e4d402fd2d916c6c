"""Logging setup and configuration."""

import logging
import sys
from typing import TextIO

from azure_pricing.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_LEVEL = logging.INFO

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "aiohttp",
    "aiohttp.access",
    "aiohttp.client",
    "asyncio",
]


def setup_logging(
    level: int | str = DEFAULT_LEVEL,
    json_format: bool = False,
    stream: TextIO | None = None,
    suppress_noisy: bool = True,
) -> logging.Logger:
    """
    Configure the root logger with a single stream handler.

    Args:
        level: Root log level, as an int or a name such as "DEBUG"
        json_format: Emit one JSON object per line instead of console text
        stream: Output stream (default: stderr, keeping stdout for results)
        suppress_noisy: Raise HTTP client and event loop loggers to WARNING

    Returns:
        Configured root logger
    """
    if isinstance(level, str):
        level_name = level
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level_name}")

    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(stream=stream))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    return root_logger
