"""Logging setup for the ingress server and the simulation client."""

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH, env_flag

# Record attributes copied into the JSON line when a caller passes them via extra=
CONTEXT_FIELDS = ("session_id", "event_type", "batch_size", "circuit_state", "context")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; pipeline context fields are lifted to the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _handlers(log_file: Path | None, console_format: str) -> dict:
    handlers: dict = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": console_format,
            "stream": "ext://sys.stdout",
        },
    }
    if log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(log_file),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "formatter": "json",
            "encoding": "utf-8",
        }
    return handlers


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the server process.

    Args:
        log_level: Root level. Defaults to LOG_LEVEL or INFO.
        log_file: Rotating JSON log path. Defaults to 04_logs/lobby_events.log;
                  LOG_TO_FILE=false disables the file handler.

    LOG_FORMAT=text switches the console to plain lines for local runs.
    """
    level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    file_path: Path | None = None
    if env_flag("LOG_TO_FILE", True):
        file_path = Path(log_file) if log_file else DEFAULT_LOG_PATH
        file_path.parent.mkdir(parents=True, exist_ok=True)

    console_format = "text" if os.getenv("LOG_FORMAT", "json").lower() == "text" else "json"
    handlers = _handlers(file_path, console_format)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": "lobby_events.logging_config.JSONFormatter"},
                "text": {"format": "%(asctime)s %(levelname)-7s %(name)s: %(message)s"},
            },
            "handlers": handlers,
            "loggers": {
                # Reconnect chatter at INFO drowns the pipeline logs
                "aiokafka": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
            "root": {"level": level, "handlers": list(handlers)},
        }
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger; call with __name__."""
    return logging.getLogger(name)
