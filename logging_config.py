"""
Logging configuration for HealthPredict Facility Finder
Provides structured logging for production monitoring
"""

import logging
import json
import os
import sys
from datetime import datetime, timezone
from typing import Optional


# Extra fields copied from LogRecord into the JSON payload when present
_EXTRA_FIELDS = (
    "endpoint",
    "status_code",
    "facility_type",
    "lat",
    "lon",
    "radius_km",
    "response_time",
    "error_type",
    "api_name",
    "operation",
    "duration",
    "result_count",
)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field_name in _EXTRA_FIELDS:
            if hasattr(record, field_name):
                log_entry[field_name] = getattr(record, field_name)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """
    Set up logging configuration for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the LOG_LEVEL environment variable, then INFO.
        json_format: Whether to use JSON formatting for structured logs.
            Defaults to LOG_FORMAT != "text".
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "json").lower() != "text"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Quiet noisy third-party loggers
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logging.getLogger("healthpredict").setLevel(numeric_level)


def get_logger(name: str) -> logging.Logger:
    """Logger under the shared "healthpredict" namespace."""
    return logging.getLogger(f"healthpredict.{name}")


def log_api_call(logger: logging.Logger, api_name: str, endpoint: str, **fields):
    """Debug record for an outbound request; one per mirror or geocoder attempt."""
    logger.debug(f"API call to {api_name}: {endpoint}",
                 extra={"api_name": api_name, "endpoint": endpoint, **fields})


def log_error(logger: logging.Logger, error_type: str, message: str, **fields):
    """Error record tagged with error_type (usually the exception class name)."""
    logger.error(message, extra={"error_type": error_type, **fields})


def log_performance(logger: logging.Logger, operation: str, duration: float, **fields):
    """
    Info record with the wall-clock duration of an operation.

    Args:
        logger: Logger instance
        operation: Operation label, e.g. "healthcare_search"
        duration: Elapsed seconds
        **fields: Search context such as lat, lon, radius_km, result_count
    """
    logger.info(f"Performance: {operation} took {duration:.2f}s",
                extra={"operation": operation, "duration": duration, **fields})
