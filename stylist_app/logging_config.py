"""JSON logging, correlation ids and log scrubbing for the stylist service."""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import sys
import time
import uuid
from typing import IO, Any, Dict, Iterator, Optional

CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

# Photos, coordinates and prompts never reach the logs verbatim.
SENSITIVE_KEYS = frozenset(
    {
        "api_key",
        "image",
        "image_data",
        "image_base64",
        "latitude",
        "longitude",
        "prompt",
        "image_prompt",
    }
)
_EMAIL = re.compile(r"[\w.\-]+@[\w.\-]+")
_MAX_STRING = 512


class JsonFormatter(logging.Formatter):
    """One JSON document per record; ``extra`` fields are scrubbed and inlined."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = record.getMessage()
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        entry.update(
            (key, redact_for_log(value))
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in entry
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(level: int | str | None = None, stream: IO[str] | None = None) -> None:
    """Route the root logger through a single JSON handler.

    Safe to call repeatedly; earlier handlers are replaced rather than stacked.
    """

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO"))


def _scrub_text(value: str) -> str:
    if value.startswith("data:"):
        return "[redacted-data-url]"
    value = _EMAIL.sub("[redacted-email]", value)
    if len(value) > _MAX_STRING:
        return f"{value[:_MAX_STRING]}...[truncated]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Return a log-safe copy of ``payload``.

    Values under :data:`SENSITIVE_KEYS` are masked at any depth, raw bytes are
    reduced to their length and long strings are truncated.
    """

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _scrub_text(payload)
    if isinstance(payload, (bytes, bytearray)):
        return f"[{len(payload)} bytes]"
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in SENSITIVE_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set)):
        return [redact_for_log(item) for item in payload]
    return _scrub_text(str(payload))


def get_logger(name: str) -> logging.Logger:
    """Module logger; installs JSON logging the first time nothing is configured."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Bind ``correlation_id`` if given, else reuse the current one or mint a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block."""

    bound = correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex
    token = CORRELATION_ID.set(bound)
    try:
        yield bound
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with scrubbed structured fields and the active correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = {"event": event, "correlation_id": correlation_id}
    extra.update(redact_for_log(fields))
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Scope a correlation id to one operation; its duration is logged at debug level."""

    logger = logging.getLogger("stylist.operations")
    started = time.perf_counter()
    with correlation_context(attributes.pop("correlation_id", None)) as correlation_id:
        try:
            yield correlation_id
        finally:
            if logger.isEnabledFor(logging.DEBUG):
                log_event(
                    logger,
                    logging.DEBUG,
                    "operation_finished",
                    operation=name,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    correlation_id=correlation_id,
                    **attributes,
                )


__all__ = [
    "JsonFormatter",
    "SENSITIVE_KEYS",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
