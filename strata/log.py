"""
Logging setup shared by every strata module.

Library code only asks for named loggers; applications that want to see the
executed SQL call configure_logging() once (level DEBUG shows every statement).

Usage:
    from strata.log import configure_logging, get_logger

    configure_logging(level="DEBUG")
    log = get_logger(__name__)
"""

import json
import logging
import logging.config
from typing import Any

from strata.config import get_settings


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(
    level: str | None = None,
    json_logs: bool | None = None,
) -> None:
    """
    Configure the ``strata`` logger.

    Args:
        level: Logging level name, defaults to STRATA_LOG_LEVEL
        json_logs: Emit JSON lines instead of the console format, defaults to STRATA_JSON_LOGS
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    json_logs = settings.json_logs if json_logs is None else json_logs

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "strata": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if json_logs else "console",
                    "level": level,
                }
            },
            "loggers": {
                "strata": {
                    "handlers": ["strata"],
                    "level": level,
                    "propagate": False,
                }
            },
        }
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger with the given name, the root logger when name is None."""
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
