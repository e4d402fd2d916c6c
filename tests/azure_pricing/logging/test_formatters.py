"""Tests for JSON and console log formatters."""

import io
import json
import logging
import sys

import pytest

from azure_pricing.errors import RateLimitedError
from azure_pricing.logging.context import clear_log_context, set_log_context
from azure_pricing.logging.formatters import ConsoleFormatter, JSONFormatter


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


def make_record(level=logging.WARNING, msg="pricing query error", exc_info=None, **extra):
    record = logging.LogRecord(
        name="azure_pricing.client",
        level=level,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_base_fields(self):
        entry = json.loads(JSONFormatter().format(make_record()))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "azure_pricing.client"
        assert entry["message"] == "pricing query error"
        assert entry["ts"].endswith("Z")
        assert "file" not in entry

    def test_extra_fields_included(self):
        record = make_record(
            region="eastus",
            error_category="rate_limited",
            url="https://prices.azure.com/api/retail/prices",
        )
        entry = json.loads(JSONFormatter().format(record))

        assert entry["region"] == "eastus"
        assert entry["error_category"] == "rate_limited"
        assert entry["url"] == "https://prices.azure.com/api/retail/prices"

    def test_numeric_fields_typed(self):
        record = make_record(attempt="2", delay_seconds="1.5", http_status="429", page="bad")
        entry = json.loads(JSONFormatter().format(record))

        assert entry["attempt"] == 2
        assert entry["delay_seconds"] == 1.5
        assert entry["http_status"] == 429
        assert entry["page"] is None

    def test_sensitive_query_params_redacted(self):
        record = make_record(url="https://example.com/p?token=abc&$skip=100")
        entry = json.loads(JSONFormatter().format(record))
        assert entry["url"] == "https://example.com/p?token=[REDACTED]&$skip=100"

    def test_context_injected(self):
        set_log_context(trace_id="trace-9", operation="get_prices")
        entry = json.loads(JSONFormatter().format(make_record()))

        assert entry["trace_id"] == "trace-9"
        assert entry["operation"] == "get_prices"

    def test_source_location_on_error(self):
        entry = json.loads(JSONFormatter().format(make_record(level=logging.ERROR)))
        assert entry["file"].endswith(":42")

    def test_exception_structured(self):
        try:
            raise RateLimitedError("status 429: slow down", status_code=429)
        except RateLimitedError:
            record = make_record(level=logging.ERROR, exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert entry["exception"]["type"] == "RateLimitedError"
        assert entry["exception"]["message"] == "rate limited: status 429: slow down"
        assert "Traceback" in entry["exception"]["stacktrace"]


class TestConsoleFormatter:
    def test_plain_output_without_tty(self):
        formatter = ConsoleFormatter(stream=io.StringIO())
        line = formatter.format(make_record(msg="Retrying"))

        assert "WARNING" in line
        assert "\033[" not in line
        assert line.endswith("Retrying")

    def test_tags_from_context(self):
        set_log_context(trace_id="0123456789abcdef", operation="get_prices")
        line = ConsoleFormatter(stream=io.StringIO()).format(make_record(msg="hi"))

        assert "[get_prices] [01234567] hi" in line
