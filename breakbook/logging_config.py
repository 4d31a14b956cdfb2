"""Centralized logging configuration (console only)."""

import logging
import sys

FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a stdout handler, once."""
    level_value = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level_value)

    # Avoid duplicate handlers when reloading
    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level_value)
    console.setFormatter(logging.Formatter(FORMAT, datefmt=DATE_FMT))
    root.addHandler(console)

    # Reduce noise from third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
