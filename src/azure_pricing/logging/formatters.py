"""Log formatters for JSON and console output."""

import json
import logging
import re
import sys
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from azure_pricing.logging.context import get_log_context


def json_serializer(obj: Any) -> Any:
    """
    Fallback serializer that keeps types where JSON has one.

    datetime/date -> ISO 8601, Enum -> value, everything else -> str.
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Correlation
        "trace_id",
        "operation",
        "component",
        # Query
        "region",
        "sku",
        "service",
        "product",
        "currency",
        "page",
        "items",
        "pages",
        # HTTP
        "url",
        "http_status",
        "duration_ms",
        # Errors
        "error_category",
        "error_message",
        # Resilience
        "attempt",
        "max_attempts",
        "delay_seconds",
        "delay_source",
    ]

    # Numeric fields are coerced so aggregations never see strings
    NUMERIC_FIELDS = {
        "duration_ms": float,
        "delay_seconds": float,
        "page": int,
        "items": int,
        "pages": int,
        "http_status": int,
        "attempt": int,
        "max_attempts": int,
    }

    URL_FIELDS = ["url"]

    SENSITIVE_PARAMS_PATTERN = re.compile(
        r"([?&])(sig|token|key|secret|password|auth)=[^&]*",
        re.IGNORECASE,
    )

    def _sanitize_url(self, url: str) -> str:
        return self.SENSITIVE_PARAMS_PATTERN.sub(r"\1\2=[REDACTED]", url)

    def _ensure_type(self, field: str, value: Any) -> Any:
        if field not in self.NUMERIC_FIELDS or value is None:
            return value
        try:
            return self.NUMERIC_FIELDS[field](value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _base_log_entry(record: logging.LogRecord) -> dict[str, Any]:
        return {
            "ts": datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
            + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

    def _inject_extra_fields(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is None:
                continue
            value = self._ensure_type(field, value)
            if field in self.URL_FIELDS and isinstance(value, str):
                value = self._sanitize_url(value)
            log_entry[field] = value

    def _inject_exception(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        if not record.exc_info:
            return

        exc_type, exc_value, _ = record.exc_info
        log_entry["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "stacktrace": self.formatException(record.exc_info),
        }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = self._base_log_entry(record)

        for key, value in get_log_context().items():
            if value:
                log_entry[key] = value

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        # Record extras win over context values
        self._inject_extra_fields(log_entry, record)
        self._inject_exception(log_entry, record)

        return json.dumps(log_entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter with color-coded log levels.

    Colors are auto-disabled when output is not a TTY (pipes, files).
    """

    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, *args, stream=None, **kwargs):
        super().__init__(*args, **kwargs)
        stream = stream or sys.stderr
        self._use_colors = hasattr(stream, "isatty") and stream.isatty()

    def _format_level_name(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, "") if self._use_colors else ""
        if not color:
            return record.levelname
        return f"{color}{record.levelname}{self.RESET}"

    @staticmethod
    def _build_tags(record: logging.LogRecord) -> list[str]:
        log_context = get_log_context()
        trace_id = getattr(record, "trace_id", None) or log_context["trace_id"]
        operation = getattr(record, "operation", None) or log_context["operation"]

        tags = []
        if operation:
            tags.append(f"[{operation}]")
        if trace_id:
            tags.append(f"[{trace_id[:8]}]")
        return tags

    def format(self, record: logging.LogRecord) -> str:
        prefix = " - ".join(
            [
                datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"),
                self._format_level_name(record),
                record.name,
            ]
        )
        tags = self._build_tags(record)
        message = record.getMessage()
        if tags:
            message = f"{' '.join(tags)} {message}"

        line = f"{prefix} - {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
