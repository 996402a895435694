"""Logging configuration for curlent.

Console records go through a Rich handler on stderr so they interleave
cleanly with the live progress line; an optional rotating log file receives
the same records in plain text.
"""

from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "curlent"


def create_rich_handler(level: str | int = logging.INFO, console: Console | None = None) -> RichHandler:
    """Create a RichHandler writing to stderr."""
    if console is None:
        console = Console(file=sys.stderr, stderr=True)
    handler = RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    return handler


def setup_logging(
    level: str | int = logging.WARNING,
    log_file: str | Path | None = None,
    console: Console | None = None,
) -> None:
    """Configure the ``curlent`` logger hierarchy.

    Args:
        level: Logging level name or number
        log_file: Optional path for a rotating plain-text log file
        console: Optional Rich console for the console handler

    """
    if isinstance(level, str):
        level = level.upper()

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "%(asctime)s %(levelname)s %(name)s.%(funcName)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {},
        "loggers": {
            ROOT_LOGGER: {
                "level": level,
                "handlers": [],
                "propagate": False,
            },
        },
    }

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "simple",
            "filename": str(log_path),
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
            "encoding": "utf-8",
        }
        logging_config["loggers"][ROOT_LOGGER]["handlers"].append("file")

    logging.config.dictConfig(logging_config)

    curlent_logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(curlent_logger.handlers):
        if isinstance(handler, RichHandler):
            curlent_logger.removeHandler(handler)
    curlent_logger.addHandler(create_rich_handler(level=level, console=console))


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``curlent`` hierarchy."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
