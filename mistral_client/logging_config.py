"""
Structured logging configuration for the Mistral client.

The library never installs handlers on import; applications opt in with
setup_logging(). Records carry contextual fields under ``extra_data``.
"""
import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "mistral_client"


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra_data") and record.extra_data:
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with colors."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        message = f"{color}[{timestamp}] {record.levelname:8}{self.RESET} {record.name}: {record.getMessage()}"

        if hasattr(record, "extra_data") and record.extra_data:
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_data.items())
            message += f" | {extra_str}"

        return message


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    logger_name: str = PACKAGE_LOGGER,
) -> logging.Logger:
    """
    Configure client logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the process-wide defaults' logging.level.
        json_format: If True, use JSON format; otherwise use console format.
            Defaults to the process-wide defaults' logging.json_format.
        logger_name: Name of the logger to configure

    Returns:
        Configured logger instance
    """
    if level is None:
        level = get_default_log_level()
    if json_format is None:
        json_format = get_default_json_format()

    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ConsoleFormatter())

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module)
    """
    return logging.getLogger(name)


class LogContext:
    """Attaches the same extra fields to every record it emits."""

    def __init__(self, logger: logging.Logger, **kwargs):
        self.logger = logger
        self.extra_data = kwargs

    def bind(self, **kwargs) -> "LogContext":
        return LogContext(self.logger, **{**self.extra_data, **kwargs})

    def _log(self, level: int, message: str, **kwargs):
        extra = {**self.extra_data, **kwargs}
        self.logger.log(level, message, extra={"extra_data": extra})

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, **kwargs)


def get_default_log_level() -> str:
    """Get the default log level from the process-wide defaults."""
    from mistral_client.config import get_defaults
    return get_defaults().logging.level


def get_default_json_format() -> bool:
    """Get the default JSON format setting from the process-wide defaults."""
    from mistral_client.config import get_defaults
    return get_defaults().logging.json_format


logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
