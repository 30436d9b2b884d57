from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, Optional, cast

import structlog

from rental_reservations.config import LOG_FORMAT, LOG_LEVEL, SERVICE_NAME

# Type alias for structlog processor
Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

NOISY_LOGGERS = ["sqlalchemy.engine", "sqlalchemy.pool", "alembic", "uvicorn.access"]


def add_service_name(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Tag every event with the service name so shared log indexes can be filtered."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(log_format: Optional[str] = None) -> None:
    """
    Configures structured logging globally using structlog.

    Request IDs bound by RequestIDMiddleware are merged into every event.

    Args:
        log_format: "json" or "console"; defaults to LOG_FORMAT
    """
    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=LOG_LEVEL,
    )

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    use_json = (log_format or LOG_FORMAT) == "json"
    renderer: Processor = cast(
        Processor,
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer(colors=True),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if use_json:
        processors.append(structlog.processors.format_exc_info)
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
