"""Logging setup.

Everything in wren logs through stdlib ``logging`` under the ``wren``
namespace (``wren.server``, ``wren.routing``, ...). Applications add their
own top-level logger names via ``configure_logging(..., names=...)``.
"""

import json
import logging
import logging.handlers
from pathlib import Path

from wren.config import AppConfig

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def log_level_for_status(status: int) -> int:
    """Map an HTTP status to the severity it is logged with.

    4xx are client mistakes (INFO), 5xx are server faults (ERROR), and
    anything else (no status, or an unexpected code) is CRITICAL.
    """
    if 400 <= status < 500:
        return logging.INFO
    if 500 <= status < 600:
        return logging.ERROR
    return logging.CRITICAL


def build_handler(config: AppConfig) -> logging.Handler:
    """Create the handler described by ``config``.

    A ``log_file`` gets a daily rotating file keeping ``log_backups`` files;
    otherwise records go to stderr.
    """
    handler: logging.Handler
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.TimedRotatingFileHandler(
            path,
            when="midnight",
            backupCount=config.log_backups,
            encoding="utf-8",
        )
    else:
        handler = logging.StreamHandler()

    if config.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    return handler


def configure_logging(config: AppConfig, *, names: tuple[str, ...] = ()) -> logging.Handler:
    """Attach one handler to the ``wren`` logger and to each of ``names``.

    Idempotent per logger: a handler previously installed by this function
    is replaced, not duplicated.
    """
    handler = build_handler(config)
    handler.set_name("wren")
    level = logging.getLevelName(config.log_level.upper())
    for name in ("wren", *names):
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            if existing.get_name() == "wren":
                logger.removeHandler(existing)
                existing.close()
        logger.addHandler(handler)
        logger.setLevel(level)
    return handler
