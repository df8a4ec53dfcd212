"""Logging infrastructure for the pantry recipe service.

Provides centralized logging with configurable format (text/JSON) and level.
Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Per-call context (request id, endpoint, image index) is attached with the
standard ``extra`` argument and shows up as extra keys in JSON output:

    logger.warning("Image fetch failed", extra={"image_index": 2})
"""

import json
import logging
import os
import sys
from typing import Any

# Record attributes copied into JSON output when a caller sets them via `extra`.
CONTEXT_FIELDS = ("request_id", "endpoint", "image_index")

# Third-party loggers that are chatty at INFO/DEBUG.
NOISY_LOGGERS = ("google.genai", "google_genai", "aiohttp", "httpx", "PIL", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with timestamp, level, logger, message, context fields
            and, when present, the exception traceback.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class RichTextFormatter(logging.Formatter):
    """Formatter that outputs colored text with a level icon."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    ICONS = {
        "DEBUG": "🔍",
        "INFO": "ℹ️",
        "WARNING": "⚠️",
        "ERROR": "❌",
        "CRITICAL": "🔥",
    }

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = self.COLORS.get(level, self.COLORS["RESET"])
        icon = self.ICONS.get(level, "")
        reset = self.COLORS["RESET"]
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")

        context = " ".join(
            f"{field}={getattr(record, field)}" for field in CONTEXT_FIELDS if hasattr(record, field)
        )
        message = record.getMessage()
        if context:
            message = f"{message} [{context}]"

        line = f"{color}{icon} {timestamp} {level:<8} {record.name:<16} {message}{reset}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        return line


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name, typically module name.

    Returns:
        Configured logger instance. Calling twice with the same name returns the
        same logger without adding a second handler.
    """
    logger_instance = logging.getLogger(name)

    if logger_instance.handlers:
        return logger_instance

    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    log_type = os.getenv("LOG_TYPE", "text").lower()

    logger_instance.setLevel(log_level)
    logger_instance.propagate = False

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if log_type == "json" else RichTextFormatter())
    logger_instance.addHandler(handler)

    return logger_instance


# Create module-level logger instance
logger = get_logger("pantry_recipes")

for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)
