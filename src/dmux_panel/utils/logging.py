"""Logging configuration."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dmux_panel import constants
from dmux_panel.utils.pathing import ensure_runtime_directories

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_NOISY_LOGGERS = ("httpx", "httpcore", "libtmux")


def log_file_path() -> Path:
    return constants.LOG_DIR / "dmux-panel.log"


def setup_logging(level: int = logging.INFO, *, console: bool = True) -> None:
    """Configure root logging with an optional console handler and a rotating file."""
    ensure_runtime_directories()
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [
        RotatingFileHandler(log_file_path(), maxBytes=2_000_000, backupCount=3)
    ]
    if console:
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Client libraries log every request at INFO.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
