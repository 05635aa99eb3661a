"""
Structured JSON logging for the agency ledger.

Every ledger logger lives under the ``ledger_kernel`` namespace and writes
one JSON object per line.  The message is a snake_case event name; event
data goes in ``extra``.  Operation-scoped fields (correlation id, actor,
operation, entity) are carried by LogContext so individual log calls do
not repeat them.

Usage::

    logger = get_logger("modules.finance.service")
    with LogContext.bind(operation="transfer_funds", actor_id="u-1"):
        logger.info("transfer_completed", extra={"amount": Decimal("300")})
"""

from __future__ import annotations

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import IO, Any

LOGGER_NAMESPACE = "ledger_kernel"

CONTEXT_FIELDS = ("correlation_id", "actor_id", "operation", "entity_id")

_context: ContextVar[dict[str, str] | None] = ContextVar("ledger_log_context", default=None)


def _merged(fields: dict[str, str | None]) -> dict[str, str]:
    unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
    if unknown:
        raise TypeError(f"unknown log context field(s): {', '.join(unknown)}")
    merged = dict(_context.get() or {})
    merged.update({k: v for k, v in fields.items() if v is not None})
    return merged


class LogContext:
    """
    Operation-scoped log fields, isolated per thread and per task.

    ``set`` and ``bind`` ignore None values, so callers can pass optional
    fields through unchanged.
    """

    @staticmethod
    def set(**fields: str | None) -> None:
        _context.set(_merged(fields))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get() or {})

    @staticmethod
    def clear() -> None:
        _context.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Add fields for the duration of the block, then restore the previous set."""
        token = _context.set(_merged(fields))
        try:
            yield
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


class StructuredFormatter(logging.Formatter):
    """
    Render a record as a single JSON line.

    Key order: envelope (ts, level, logger, message), LogContext fields,
    ``extra`` fields, then error fields when the record carries an
    exception.  Context fields win over an ``extra`` key of the same name.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())
        payload.update(
            {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES and k not in payload}
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._error_fields(record))
        return json.dumps(payload, default=_json_default, ensure_ascii=False)

    def _error_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # LedgerError subclasses keep their details as public attributes.
        for name, value in vars(exc).items():
            if not name.startswith("_") and name != "code":
                fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_setup_lock = threading.Lock()
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Logger ``ledger_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: IO[str] | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``ledger_kernel`` logger.

    Only the first call has an effect until ``reset_logging()``.  Ledger
    records do not propagate to the root logger.
    """
    global _configured
    with _setup_lock:
        if _configured:
            return
        _configured = True
        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.setLevel(level)
        namespace.propagate = False
        target = handler or logging.StreamHandler(stream or sys.stderr)
        target.setFormatter(StructuredFormatter())
        namespace.addHandler(target)


def reset_logging() -> None:
    """Drop every handler and allow configure_logging() again. Tests only."""
    global _configured
    with _setup_lock:
        _configured = False
        namespace = logging.getLogger(LOGGER_NAMESPACE)
        for existing in list(namespace.handlers):
            namespace.removeHandler(existing)
        namespace.setLevel(logging.WARNING)
