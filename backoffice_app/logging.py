"""Logging setup shared by ``manage.py`` and the WSGI entry point.

Records go to the console. Setting ``LOG_FILE`` also writes them to a
size-rotated file next to the console output.
"""

import logging
import logging.config
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3

_configured = False


def _handler_config() -> dict:
    handlers = {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    }
    log_file = os.getenv("LOG_FILE")
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "plain",
            "filename": log_file,
            "maxBytes": LOG_MAX_BYTES,
            "backupCount": LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }
    return handlers


def configure_logging() -> None:
    """Install the root handlers once per process.

    ``LOG_LEVEL`` picks the root level (default ``INFO``); an unknown name
    falls back to ``INFO``. SQL query logging stays at WARNING unless
    ``LOG_SQL`` is set.
    """

    global _configured
    if _configured:
        return

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(level_name), int):
        level_name = "INFO"
    handlers = _handler_config()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"plain": {"format": LOG_FORMAT}},
            "handlers": handlers,
            "root": {"level": level_name, "handlers": list(handlers)},
            "loggers": {
                "django.db.backends": {
                    "level": "DEBUG" if os.getenv("LOG_SQL") else "WARNING",
                },
            },
        }
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def flush_logs() -> None:
    """Flush every handler attached to the root logger."""
    for handler in logging.getLogger().handlers:
        handler.flush()


__all__ = ["configure_logging", "get_logger", "flush_logs"]
