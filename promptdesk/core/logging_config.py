"""Centralized logging configuration for the UI.

Provides logging with separate files for:
- info.log: General application logs (INFO level and above)
- error.log: Error logs only (ERROR level and above)
"""

import logging
import sys
from pathlib import Path

from promptdesk.core.config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Configure application logging with file and console handlers.

    Creates separate log files for info and error levels inside
    ``settings.log_dir``.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        The configured root logger.
    """
    settings = settings or get_settings()

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    info_log_path = log_dir / "info.log"
    error_log_path = log_dir / "error.log"

    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    simple_formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if settings.log_level == "DEBUG" else logging.INFO)

    # Streamlit re-executes the script on every interaction
    root_logger.handlers.clear()

    info_handler = logging.FileHandler(info_log_path, encoding="utf-8")
    info_handler.setLevel(logging.INFO)
    info_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(info_handler)

    error_handler = logging.FileHandler(error_log_path, encoding="utf-8")
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if settings.log_level == "DEBUG" else logging.INFO)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: The name for the logger (typically __name__ of the module).

    Returns:
        A configured logger instance.
    """
    return logging.getLogger(name)
