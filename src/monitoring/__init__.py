"""
Logging infrastructure for the content rating service.

This package provides:
- Structured logging with JSON output
- Request logging middleware with request IDs and timing

Usage:
    from monitoring import get_logger, configure_logging

    configure_logging(level="DEBUG")
    logger = get_logger("my_module")
    logger.info("Labeled page", extra={"systems": 2})
"""

from monitoring.logging import LoggingContext, configure_logging, get_logger
from monitoring.middleware import setup_request_logging

__all__ = [
    "LoggingContext",
    "configure_logging",
    "get_logger",
    "setup_request_logging",
]
