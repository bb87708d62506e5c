"""
structlog setup shared by the checkpoint service and its clients.

Every log line carries the service name and, when known, the request's
correlation_id and the chat thread it concerns:

    configure_logging(service_name="rest_service", log_level="INFO")
    logger = get_logger(__name__)
    logger.info("Checkpoint saved", event_type=LogEventType.CHECKPOINT_SAVE, thread_id="t-1")
"""

import logging
import sys
from contextvars import ContextVar
from enum import Enum
from typing import Any

import structlog

correlation_id_ctx: ContextVar[str | None] = ContextVar("correlation_id", default=None)
thread_id_ctx: ContextVar[str | None] = ContextVar("thread_id", default=None)


class LogEventType(str, Enum):
    """Event types for filtering in Loki/Grafana."""

    # Checkpoint events
    CHECKPOINT_SAVE = "checkpoint_save"
    CHECKPOINT_LOAD = "checkpoint_load"
    CHECKPOINT_LIST = "checkpoint_list"
    WRITES_STAGED = "writes_staged"

    # Thread events
    THREAD_CREATED = "thread_created"
    THREAD_DELETED = "thread_deleted"

    # General events
    ERROR = "error"
    WARNING = "warning"
    STARTUP = "startup"
    SHUTDOWN = "shutdown"


def _add_request_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add correlation_id and thread_id from context.

    A thread_id passed to the log call itself is kept.
    """
    cid = correlation_id_ctx.get()
    if cid:
        event_dict["correlation_id"] = cid
    tid = thread_id_ctx.get()
    if tid is not None:
        event_dict.setdefault("thread_id", tid)
    return event_dict


def _make_service_processor(service_name: str):
    def processor(
        logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["service"] = service_name
        return event_dict

    return processor


def _normalize_event_type(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    event_type = event_dict.get("event_type")
    if isinstance(event_type, LogEventType):
        event_dict["event_type"] = event_type.value
    return event_dict


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> None:
    """
    Configure structlog for a service.

    Args:
        service_name: Value of the ``service`` field on every line
        log_level: DEBUG, INFO, WARNING or ERROR
        json_format: JSON lines when True, coloured console output otherwise
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    for noisy in ("httpx", "httpcore", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_request_context,
        _make_service_processor(service_name),
        _normalize_event_type,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True, sort_keys=True))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def set_correlation_id(cid: str) -> None:
    correlation_id_ctx.set(cid)


def get_correlation_id() -> str | None:
    return correlation_id_ctx.get()


def set_thread_id(thread_id: str) -> None:
    """Attach a chat thread to every log line of the current context."""
    thread_id_ctx.set(thread_id)


def get_thread_id() -> str | None:
    return thread_id_ctx.get()


def clear_context() -> None:
    correlation_id_ctx.set(None)
    thread_id_ctx.set(None)
