"""Logging configuration helpers."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from busreader.config.models import LoggingConfig

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _rotating_file_handler(config: LoggingConfig, log_path: Path) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        filename=log_path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )


def configure_logging(config: LoggingConfig) -> Path:
    """Send every logger to the rotating log file and, if enabled, the console.

    Per-frame pipeline detail is logged at DEBUG, so INFO keeps the file down
    to announcements, lifecycle events and the periodic FPS line. Loggers
    named in ``config.quiet_loggers`` are held at WARNING. Returns the
    resolved log file path.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    log_path = config.resolved_path()

    handlers = [_rotating_file_handler(config, log_path)]
    if config.console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.captureWarnings(True)
    logging.basicConfig(level=level, handlers=handlers, force=True)
    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("app.logging").debug("Logging to %s at %s", log_path, logging.getLevelName(level))
    return log_path
