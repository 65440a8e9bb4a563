"""Structured JSON logging for the asset directory.

Events go to stderr so CLI output on stdout stays clean. Every event carries
the ``service`` and ``environment`` from settings; callers add key-value
context such as ``code=``, ``token=`` or ``status_code=``.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping

import structlog

from .config import settings

DEFAULT_LOG_LEVEL = settings.log_level

_configured = False


def add_service_context(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", settings.service_name)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _configure_structlog(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service_context,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL, *, force: bool = False) -> None:
    """Set up stdlib + structlog once; ``force`` reapplies a new level."""

    global _configured
    if _configured and not force:
        return
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=force,
    )
    _configure_structlog(level)
    _configured = True


def get_logger(name: str, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """Return a structured logger, bound to ``initial_values`` when given."""

    configure_logging()
    logger = structlog.get_logger(name)
    if initial_values:
        return logger.bind(**initial_values)
    return logger


__all__ = ["add_service_context", "configure_logging", "get_logger"]
