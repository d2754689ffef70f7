"""Structured logging setup."""

import logging

import structlog

from flagaccess.config import Settings, settings as default_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for the access core.

    JSON output is used in production or when ``log_json`` is set;
    otherwise the development console renderer is used.

    Args:
        settings: Settings to read the level and renderer from
    """
    settings = settings or default_settings
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production or settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = [
    "configure_logging",
]
