"""structlog on top of stdlib logging, emitted from a background thread.

structlog events and foreign stdlib records (httpx, Pillow) share one
``ProcessorFormatter`` and are written to stderr by a ``QueueListener``;
stdout stays free for command output.
"""

from __future__ import annotations

import atexit
import copy
import logging
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional

import structlog

from mediapub.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

_listener: Optional[QueueListener] = None

_NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "PIL")


def _stamp_foreign_record(
    _logger: Any, _method: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp foreign stdlib records with their creation time.

    The listener formats records later, on its own thread.
    """
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = created.isoformat().replace("+00:00", "Z")
    return event_dict


def build_processor_formatter(config: AppConfig) -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering structlog and foreign stdlib records alike."""
    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer()
        if config.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            _stamp_foreign_record,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


class _EventDictQueueHandler(QueueHandler):
    # the stock prepare() stringifies record.msg, losing structlog's event dict
    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        return copy.copy(record)


def _start_listener(config: AppConfig) -> None:
    global _listener

    shutdown_logging()

    stderr = logging.StreamHandler(stream=sys.stderr)
    stderr.setFormatter(build_processor_formatter(config))

    records: queue.Queue[logging.LogRecord] = queue.Queue()

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_EventDictQueueHandler(records))
    root.setLevel(config.log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.INFO, root.level))

    _listener = QueueListener(records, stderr)
    _listener.start()
    atexit.register(shutdown_logging)


def configure_logging(config: AppConfig) -> None:
    """Configure structlog and route stdlib logging through the queue."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _start_listener(config)
    log.debug(
        "logging_configured", log_level=config.log_level, log_format=config.log_format
    )


def shutdown_logging() -> None:
    """Stop the listener, flushing queued records."""
    global _listener
    if _listener is None:
        return
    try:
        _listener.stop()
    finally:
        _listener = None
