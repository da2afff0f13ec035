"""Utility modules."""

from ai_orchestrator.utils.logging import get_logger, setup_logging, setup_logging_from_settings

__all__ = [
    "get_logger",
    "setup_logging",
    "setup_logging_from_settings",
]
