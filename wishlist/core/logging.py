from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

import structlog
from structlog.typing import Processor

from wishlist.core.config import Settings, settings

_NOISY_LOGGERS = ("httpx", "httpcore")


def _resolve_level(config: Settings) -> int:
    if config.log_level:
        return logging.getLevelName(config.log_level.upper())
    return logging.DEBUG if config.debug else logging.INFO


def configure_logging(config: Settings | None = None) -> None:
    """Route structlog through stdlib logging.

    Local development gets the coloured console renderer; every other
    environment emits one JSON document per event.
    """

    config = config or settings
    level = _resolve_level(config)

    shared_processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: Processor
    if config.environment == "local":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    processors: Sequence[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        *shared_processors,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
