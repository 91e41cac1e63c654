"""Structured logging configuration using structlog.

Every log line emitted while a session is being driven can carry three
correlation ids:

    session_id   one per loaded image (set by the CLI runners)
    event_index  position of the pointer event being replayed
    region_id    region being created, updated or removed

``region_id`` is scoped: ``bound_region`` sets it for the duration of one
store operation and restores the previous value on exit, so a log line
emitted after the operation never carries a stale region.

Output is JSON for machines or colored console text for humans.
"""

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import Processor

from roicrop.config import settings

_CORRELATION_IDS: dict[str, ContextVar[Any]] = {
    "session_id": ContextVar("session_id", default=None),
    "region_id": ContextVar("region_id", default=None),
    "event_index": ContextVar("event_index", default=None),
}


def set_correlation_context(
    session_id: str | None = None,
    region_id: str | None = None,
    event_index: int | None = None,
) -> None:
    """Set correlation IDs for the current context.

    Arguments left as None keep their current value.

    Args:
        session_id: Identifier for the interaction session (one image).
        region_id: Region currently being manipulated.
        event_index: Position of the pointer event being processed.
    """
    values = {"session_id": session_id, "region_id": region_id, "event_index": event_index}
    for name, value in values.items():
        if value is not None:
            _CORRELATION_IDS[name].set(value)


def clear_correlation_context() -> None:
    """Clear all correlation context variables."""
    for var in _CORRELATION_IDS.values():
        var.set(None)


@contextmanager
def bound_region(region_id: str) -> Iterator[None]:
    """Tag log lines emitted inside the block with ``region_id``.

    Example:
        >>> with bound_region("selection-3"):
        ...     logger.debug("Region updated")  # carries region_id
    """
    token = _CORRELATION_IDS["region_id"].set(region_id)
    try:
        yield
    finally:
        _CORRELATION_IDS["region_id"].reset(token)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor that copies the set correlation ids into the event."""
    _ = logger, method_name  # Required by structlog processor signature
    for name, var in _CORRELATION_IDS.items():
        value = var.get()
        # event_index 0 is a real value
        if value is not None:
            event_dict.setdefault(name, value)
    return event_dict


def _renderer_chain(log_format: str) -> list[Processor]:
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_correlation_ids,
    ]
    if log_format == "json":
        return [
            *shared,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [*shared, structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level name. Defaults to settings.LOG_LEVEL.
        log_format: "console" or "json". Defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    structlog.configure(
        processors=_renderer_chain(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    # basicConfig leaves the level alone once the root logger has handlers
    logging.getLogger().setLevel(log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
