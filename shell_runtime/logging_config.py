"""
Structured logging configuration for the hydration runtime.

Provides JSON-formatted logs with trace_id support, so that every line
written while one message is dispatched can be correlated.

Environment Variables:
    HYDRATION_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    HYDRATION_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from shell_runtime.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, trace_id="msg-42")
    logger.info("Dispatching", extra={"msg_type": "UrlChanged"})
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure root logger with structured logging.

    Arguments win over the environment:
    - HYDRATION_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - HYDRATION_LOG_FORMAT: json, text (default: json)
    """
    log_level = (level or os.getenv("HYDRATION_LOG_LEVEL", "INFO")).upper()
    log_format = (fmt or os.getenv("HYDRATION_LOG_FORMAT", "json")).lower()
    resolved = LEVELS.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr, so that --json output on stdout stays machine-readable
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.addFilter(TraceIDFilter())

    if log_format == "json":
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s [trace_id=%(trace_id)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger with optional trace_id for correlation.

    Args:
        name: Logger name (typically __name__)
        trace_id: Trace ID for correlating logs (typically the message sequence number)

    Returns:
        LoggerAdapter with trace_id in extra fields
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"trace_id": trace_id or "N/A"})


class TraceIDFilter(logging.Filter):
    """
    Logging filter that adds trace_id to all log records.

    Records from the core modules use plain loggers and carry no trace_id.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            record.trace_id = "N/A"  # type: ignore
        return True
