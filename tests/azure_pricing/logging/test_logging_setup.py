"""Tests for setup_logging()."""

import io
import json
import logging

import pytest

from azure_pricing.logging.formatters import ConsoleFormatter, JSONFormatter
from azure_pricing.logging.setup import NOISY_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)


class TestSetupLogging:
    def test_console_handler(self):
        root = setup_logging(level="DEBUG", stream=io.StringIO())

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)

    def test_json_output(self):
        stream = io.StringIO()
        setup_logging(level=logging.INFO, json_format=True, stream=stream)

        logging.getLogger("test.setup").info("hello", extra={"region": "eastus"})

        entry = json.loads(stream.getvalue().strip())
        assert entry["message"] == "hello"
        assert entry["region"] == "eastus"
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_level_filters(self):
        stream = io.StringIO()
        setup_logging(level="WARNING", stream=stream)

        logging.getLogger("test.setup").info("hidden")

        assert stream.getvalue() == ""

    def test_noisy_loggers_suppressed(self):
        setup_logging(stream=io.StringIO())
        assert logging.getLogger("aiohttp").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.WARNING

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="LOUD", stream=io.StringIO())
