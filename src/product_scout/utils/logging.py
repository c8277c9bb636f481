"""
Logging configuration for Product Scout.

All modules log through children of the ``product_scout`` logger.
Console output is on by default; a rotating file handler is added
when LoggingSettings names a file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from product_scout.config.settings import LoggingSettings


ROOT_LOGGER_NAME = "product_scout"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_logging_configured = False


def setup_logging(
    settings: "LoggingSettings | None" = None,
    level: str | None = None,
) -> logging.Logger:
    """
    Configure the application logging system.

    Should be called once at application startup; later calls return
    the already configured logger.

    Args:
        settings: Logging configuration. If None, uses sensible defaults.
        level: Level name overriding the one in settings (e.g. from --verbose)

    Returns:
        The configured root logger for the application.
    """
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)

    if _logging_configured:
        return logger

    logger.handlers.clear()

    if settings is None:
        level_name = "INFO"
        log_format = DEFAULT_FORMAT
        date_format = DEFAULT_DATE_FORMAT
        log_to_console = True
        file_path = None
        max_file_size_mb = 10
        backup_count = 3
    else:
        level_name = settings.level
        log_format = settings.format
        date_format = settings.date_format
        log_to_console = settings.log_to_console
        file_path = settings.file_path
        max_file_size_mb = settings.max_file_size_mb
        backup_count = settings.backup_count

    if level is not None:
        level_name = level

    numeric_level = getattr(logging, level_name.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(fmt=log_format, datefmt=date_format)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if file_path is not None:
        logger.addHandler(_create_file_handler(
            file_path=file_path,
            max_bytes=max_file_size_mb * 1024 * 1024,
            backup_count=backup_count,
            level=numeric_level,
            formatter=formatter,
        ))

    # Prevent duplicate records through the root logger
    logger.propagate = False

    _logging_configured = True

    return logger


def _create_file_handler(
    file_path: Path,
    max_bytes: int,
    backup_count: int,
    level: int,
    formatter: logging.Formatter,
) -> RotatingFileHandler:
    """Create a rotating file handler, making the parent directory."""
    file_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(file_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)

    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Module name for the logger, typically ``__name__``.
              If None, returns the application root logger.

    Returns:
        Logger instance configured as child of application root.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Remove all handlers and allow setup_logging() to run again."""
    global _logging_configured

    logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    logger.propagate = True
    _logging_configured = False


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that appends context to every message.

    Example:
        >>> logger = LoggerAdapter(get_logger(__name__), {"domain": "shop.test"})
        >>> logger.info("Crawl started")  # "Crawl started [domain=shop.test]"
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        if self.extra:
            context_str = " ".join(f"[{k}={v}]" for k, v in self.extra.items())
            msg = f"{msg} {context_str}"
        return msg, kwargs


def get_logger_with_context(
    name: str | None = None,
    **context: str,
) -> LoggerAdapter:
    """
    Get a logger with additional context that appears in all messages.

    Args:
        name: Module name for the logger
        **context: Key-value pairs to include in all log messages

    Returns:
        LoggerAdapter with context attached
    """
    return LoggerAdapter(get_logger(name), context)
