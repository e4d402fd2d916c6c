"""Context variables for structured logging."""

from contextvars import ContextVar

# Oversized trace IDs from callers are cut to keep log lines bounded
MAX_TRACE_ID_LENGTH = 128

_trace_id: ContextVar[str] = ContextVar("trace_id", default="")
_operation: ContextVar[str] = ContextVar("operation", default="")


def set_log_context(
    trace_id: str | None = None,
    operation: str | None = None,
) -> None:
    if trace_id is not None:
        _trace_id.set(trace_id[:MAX_TRACE_ID_LENGTH])
    if operation is not None:
        _operation.set(operation)


def get_log_context() -> dict[str, str]:
    return {
        "trace_id": _trace_id.get(),
        "operation": _operation.get(),
    }


def clear_log_context() -> None:
    _trace_id.set("")
    _operation.set("")
