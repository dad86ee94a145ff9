"""Logging setup for Wishlist Tracker."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def setup_logging(
    level: str = "WARNING",
    log_file: Path | None = None,
    max_bytes: int = 2 * 1024 * 1024,
    backups: int = 3,
) -> None:
    """Configure the package logger once per process.

    Args:
        level: Log level name, e.g. "INFO"
        log_file: Optional path for a rotating log file
        max_bytes: Rotation size for the log file
        backups: Number of rotated files to keep
    """
    global _configured
    if _configured:
        return

    log_level = getattr(logging, level.upper(), logging.WARNING)
    root = logging.getLogger("wishlist_tracker")
    root.setLevel(log_level)

    console_handler = RichHandler(
        console=Console(stderr=True), show_path=False, rich_tracebacks=True
    )
    console_handler.setLevel(log_level)
    root.addHandler(console_handler)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backups
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(file_handler)
        except OSError as e:
            root.warning("Failed to initialize file logging: %s", e)

    _configured = True
