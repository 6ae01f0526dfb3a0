"""Logging setup driven by Settings."""

import json
import logging
import sys

from petition_admin.core.config import Settings, get_settings

ROOT_LOGGER = "petition_admin"

DEV_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, built with json.dumps so messages are escaped."""

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach a stdout handler to the package logger using the configured format.

    Only the ``petition_admin`` logger tree is touched; the root logger and
    other libraries keep their own configuration, apart from SQLAlchemy's
    engine logger, which stays at WARNING unless DEBUG is requested.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "structured":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if level == logging.DEBUG else logging.WARNING
    )

    logger.debug(f"Logging configured: level={settings.log_level}, format={settings.log_format}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the petition_admin tree."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
