"""
structlog setup for smolpaste.

Call ``configure_service_logging`` once at process start, then obtain
per-module loggers with ``create_service_logger``. Request handlers bind a
correlation id with ``bind_request_context`` so every line logged while
handling the request carries it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.typing import EventDict, Processor


def _service_fields(service_name: str, environment: str) -> Processor:
    def add_service_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service_fields


def configure_service_logging(
    service_name: str,
    log_level: str = "INFO",
    environment: str | None = None,
) -> None:
    """
    Route structlog through the stdlib root logger on stdout.

    Output is JSON when ``LOG_FORMAT=json``, or when ``LOG_FORMAT`` is unset
    and the environment is ``production``; a colored console renderer
    otherwise.

    Args:
        service_name: Value of the ``service`` field on every record
        log_level: Root logger level name
        environment: Deployment environment, ``ENVIRONMENT`` env var by default
    """
    environment = environment or os.getenv("ENVIRONMENT", "development")
    log_format = os.getenv("LOG_FORMAT", "").lower()
    as_json = log_format == "json" or (not log_format and environment == "production")

    processors: list[Processor] = [
        merge_contextvars,
        _service_fields(service_name, environment),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]
    if as_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer()]

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.getLevelName(log_level.upper()),
        force=True,
    )
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_service_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound to ``logger_name`` when given."""
    logger = structlog.get_logger()
    return logger.bind(logger_name=name) if name else logger


def bind_request_context(correlation_id: str, operation: str, **context: Any) -> None:
    """
    Reset the per-request logging context and bind request identifiers.

    Never pass credentials here.
    """
    clear_contextvars()
    bind_contextvars(correlation_id=correlation_id, operation=operation, **context)
