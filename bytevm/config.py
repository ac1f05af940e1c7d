"""
Configuration defaults and logging setup for bytevm.
"""

import logging
import os
import sys

import structlog
from structlog.stdlib import LoggerFactory

# Width of the single runtime value type
VALUE_BITS = 32

DEFAULT_OVERFLOW = "wrap"
DEFAULT_LOG_LEVEL = "WARNING"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_logging_configured = False


def env_overflow() -> str:
    return os.environ.get("BYTEVM_OVERFLOW", DEFAULT_OVERFLOW).lower()


def env_log_level() -> str:
    return os.environ.get("BYTEVM_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def configure_logging(log_level: str = DEFAULT_LOG_LEVEL, json_logs: bool = False) -> None:
    """
    Configure structured logging once per process.

    Tracked here rather than with structlog.is_configured(), which also turns
    true after a structlog.testing.capture_logs block.
    """
    global _logging_configured
    if _logging_configured:
        return
    _logging_configured = True

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.WARNING),
        stream=sys.stderr,
        force=True,
    )
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # capture_logs needs uncached loggers
        cache_logger_on_first_use=False,
    )
    logger = structlog.get_logger(__name__)
    logger.debug("Logging configured", log_level=log_level)
