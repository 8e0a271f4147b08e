"""
Structured Logging
==================

JSON or human-readable logging with a per-component field and a session
trace id.

- ``setup_structured_logging`` configures the root logger once (CLI startup).
- ``get_component_logger`` returns an adapter that stamps ``component`` and
  the active ``trace_id`` on every record.
- ``trace_context`` binds a trace id (one per listening session or video
  loop) for everything logged inside it.

Call sites log directly: ``logger.info("Session active", extra={"event": "session_active"})``.
"""

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from pythonjsonlogger import jsonlogger

trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)


def get_trace_id() -> Optional[str]:
    """Current trace id, or None outside a ``trace_context``."""
    return trace_id_var.get()


def generate_trace_id(prefix: str = "trace") -> str:
    """
    Build a short unique trace id.

    Args:
        prefix: Kind of work being traced (e.g. "session", "video")

    Returns:
        ``{prefix}-{8 hex chars}``
    """
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@contextmanager
def trace_context(trace_id: Optional[str] = None):
    """
    Bind ``trace_id`` for the duration of the block.

    Usage:
        with trace_context(generate_trace_id("session")) as tid:
            await recognizer.listen(...)
    """
    if trace_id is None:
        trace_id = generate_trace_id()

    token = trace_id_var.set(trace_id)
    try:
        yield trace_id
    finally:
        trace_id_var.reset(token)


class _JsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with ``level``/``logger`` keys and the context trace id."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record.pop("levelname", None)
        log_record.pop("name", None)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        current_trace_id = get_trace_id()
        if current_trace_id and "trace_id" not in log_record:
            log_record["trace_id"] = current_trace_id


class _HumanReadableFormatter(logging.Formatter):
    """Column layout for terminals: time | level | component | event | message."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(component)-16s | %(event)-22s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "component"):
            record.component = record.name.split(".")[-1]
        if not hasattr(record, "event"):
            record.event = "-"
        return super().format(record)


class _AutoFlushStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every record."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def setup_structured_logging(
    level: str = "INFO",
    json_format: bool = True,
    indent: Optional[int] = None,
    output_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines if True, column layout otherwise
        indent: JSON indent (None = compact)
        output_file: Log file path with size-based rotation (None = stdout)
        max_bytes: Rotation size per file
        backup_count: Rotated files kept

    Usage:
        setup_structured_logging(level="DEBUG", json_format=False)
        setup_structured_logging(output_file="logs/livesense.log")
    """
    if json_format:
        formatter = _JsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(message)s",
            timestamp=True,
            json_indent=indent,
        )
    else:
        formatter = _HumanReadableFormatter()

    if output_file:
        log_path = Path(output_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        print(
            f"Logging to file: {output_file} (max: {max_bytes // 1024 // 1024}MB, backups: {backup_count})",
            file=sys.stderr,
        )
    else:
        handler = _AutoFlushStreamHandler(sys.stdout)

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))


class ComponentLogger(logging.LoggerAdapter):
    """
    Logger adapter that adds ``component`` and ``trace_id`` to every record.

    Precedence, highest first: call-site ``extra``, adapter ``extra``
    (component), context trace id.

    Usage:
        >>> logger = ComponentLogger(logging.getLogger(__name__), {"component": "speech"})
        >>> logger.info("Top changed", extra={"event": "top_changed", "label": "yes"})
    """

    def process(self, msg, kwargs):
        extra = dict(self.extra)

        trace_id = get_trace_id()
        if trace_id:
            extra["trace_id"] = trace_id

        if "extra" in kwargs:
            extra.update(kwargs["extra"])

        kwargs["extra"] = extra
        return msg, kwargs


def get_component_logger(name: str, component: str) -> ComponentLogger:
    """
    Logger for ``name`` with ``component`` stamped on every record.

    Args:
        name: Logger name (usually ``__name__``)
        component: Component name (e.g. "session", "video_loop", "mqtt_sink")
    """
    return ComponentLogger(logging.getLogger(name), {"component": component})


__all__ = [
    "setup_structured_logging",
    "trace_context",
    "get_trace_id",
    "generate_trace_id",
    "ComponentLogger",
    "get_component_logger",
]
