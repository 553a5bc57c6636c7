"""Logging for the gateway.

Console records always go to stderr because stdout carries the MCP stdio
transport. An optional rotating file under ``log_dir`` receives the detailed
format, with each ``extra=`` field on its own indented line.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "supabase_lite"
DEFAULT_LOG_DIR = "logs"
LOG_FILE_NAME = "supabase-lite.log"

_MAX_LOG_BYTES = 5 * 1024 * 1024
_LOG_BACKUPS = 3
_MAX_FIELD_CHARS = 200

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


@dataclass(frozen=True)
class LoggingConfig:
    level: int = logging.INFO
    log_dir: str | None = DEFAULT_LOG_DIR  # None logs to stderr only


class DetailedTextFormatter(logging.Formatter):
    """Header line per record followed by its ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        lines = [f"{self.formatTime(record)} | {record.levelname:<7} | {record.name} | {record.getMessage()}"]
        lines.extend(f"  {key}: {_field_text(value)}" for key, value in extra_fields(record).items())
        if record.exc_info:
            lines.append(self.formatException(record.exc_info))
        return "\n".join(lines)


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS and not k.startswith("_")}


def _field_text(value: Any) -> str:
    if isinstance(value, (dict, list, tuple)):
        text = json.dumps(value, default=str)
    else:
        text = str(value)
    if len(text) > _MAX_FIELD_CHARS:
        return text[:_MAX_FIELD_CHARS] + "..."
    return text


def get_logger(name: str | None = None) -> logging.Logger:
    logger = logging.getLogger(name or LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    return logger


def configure_logging(config: LoggingConfig | None = None) -> Path | None:
    """Install the stderr handler and, when ``log_dir`` is set, the rotating file handler.

    Returns:
        Path of the log file, or None when logging to stderr only
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(config.level)
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(console)

    if config.log_dir is None:
        return None

    log_file = Path(config.log_dir) / LOG_FILE_NAME
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS)
    except OSError as e:
        logger.warning(f"Could not open log file {log_file}, logging to stderr only: {e}")
        return None
    file_handler.setFormatter(DetailedTextFormatter())
    logger.addHandler(file_handler)
    return log_file
