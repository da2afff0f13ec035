"""Structured logging setup using structlog.

Every module logs through `get_logger(__name__)` with keyword context:

    logger.info("Provider failed", provider="openai", error=str(e))

Call `setup_logging` once at process start; until then structlog's
defaults print to stdout.
"""

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from ai_orchestrator.config.settings import Settings


# SDK and HTTP client loggers that are chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "google_genai")


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """
    Configure structured logging.

    Args:
        log_level: Standard level name (DEBUG, INFO, ...)
        log_format: "console" for human-readable lines, "json" for one
            JSON object per line
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_settings(settings: "Settings") -> None:
    setup_logging(settings.log_level, settings.log_format)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger."""
    return structlog.get_logger(name)
