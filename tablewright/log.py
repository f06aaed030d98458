"""Logging configuration for tablewright."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import colorlog

if TYPE_CHECKING:
    from .config import Settings

BASE_LOG_FORMAT = (
    "%(asctime)s %(levelname)8s %(message)s (%(name)s@%(filename)s:%(lineno)d)"
)

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def setup_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_colors: bool = True,
    enable_file_logging: bool = False,
    log_dir: Path | None = None,
    is_test_env: bool = False,
) -> None:
    """Configure logging for tablewright.

    Args:
        level: Logging level (int or level name such as "DEBUG")
        format_string: Custom format string for console messages
        use_colors: Whether to use colored console output
        enable_file_logging: Whether to also write to a log file
        log_dir: Directory for log files (defaults to ./logs or ./logs/test)
        is_test_env: Whether this is a test environment
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    if log_dir is None:
        log_dir = Path("logs", "test") if is_test_env else Path("logs")

    handlers = [
        _create_console_handler(format_string or _console_format(use_colors), use_colors)
    ]

    if enable_file_logging:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_create_file_handler(log_dir, is_test_env))

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _console_format(use_colors: bool) -> str:
    if use_colors:
        return (
            "%(asctime)s %(log_color)s%(levelname)8s%(reset)s %(message)s "
            "\033[90m(%(name)s@%(filename)s:%(lineno)d)\033[0m"
        )
    return BASE_LOG_FORMAT


def _create_console_handler(format_string: str, use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter: logging.Formatter
    if use_colors:
        formatter = colorlog.ColoredFormatter(
            format_string,
            datefmt="%m-%d %H:%M:%S",
            log_colors=LOG_COLORS,
            style="%",
        )
    else:
        formatter = logging.Formatter(format_string, datefmt="%m-%d %H:%M:%S")
    handler.setFormatter(formatter)
    return handler


def _create_file_handler(log_dir: Path, is_test_env: bool) -> logging.Handler:
    handler: logging.Handler
    if is_test_env:
        handler = logging.FileHandler(log_dir / "test.log", mode="w")
    else:
        handler = logging.handlers.RotatingFileHandler(
            log_dir / "tablewright.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=4,
            encoding="utf-8",
        )
    handler.setFormatter(logging.Formatter(BASE_LOG_FORMAT, datefmt="%m-%d %H:%M:%S"))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_production_logging(level: int | str = logging.INFO) -> None:
    """Setup logging with a rotating log file."""
    setup_logging(level=level, enable_file_logging=True, is_test_env=False)


def setup_test_logging(level: int | str = logging.DEBUG) -> None:
    """Setup logging for tests; the log file is overwritten on every run."""
    setup_logging(level=level, enable_file_logging=True, is_test_env=True)


def setup_logging_from_settings(settings: "Settings") -> None:
    """Setup logging from loaded settings (``TABLEWRIGHT_LOG_*`` variables)."""
    setup_logging(
        level=settings.log_level,
        enable_file_logging=settings.log_to_file,
        is_test_env=settings.is_testing,
    )
