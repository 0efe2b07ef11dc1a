"""
Logging for Commandcord.

Every module asks for ``get_logger(__name__-ish short name)`` and receives a
``commandcord.<name>`` logger with two handlers:

- console: prompt_toolkit output, ANSI-coloured when stderr is a TTY
- file: ``<logs dir>/commandcord.log``, rotated at 5 MB, three backups kept

Environment variables:
    COMMANDCORD_LOGS_DIR      directory for the log file (default ./logs)
    COMMANDCORD_LOG_LEVEL     console level name (default INFO)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

LOGS_DIR: Path = Path(os.getenv("COMMANDCORD_LOGS_DIR", Path.cwd() / "logs")).resolve()
LOG_FILENAME = "commandcord.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

LOG_FORMAT: str = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

LOG_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[38;5;88m",
}
RESET_COLOR = "\033[0m"

# Third-party loggers that only report at ERROR and above
LIBRARY_LOGGERS = [
    "discord", "discord.gateway", "discord.client", "discord.http",
    "motor", "pymongo", "pymongo.topology", "pymongo.connection", "pymongo.serverSelection",
    "aiosqlite", "websockets", "aiohttp",
]


class ColorFormatter(logging.Formatter):
    """Wraps each formatted record in the ANSI colour of its level."""

    def format(self, record: logging.LogRecord) -> str:
        color = LOG_COLORS.get(record.levelname, "")
        message = super().format(record)
        return f"{color}{message}{RESET_COLOR}" if color else message


class PromptToolkitHandler(logging.Handler):
    """Console handler printing through prompt_toolkit so an attached prompt stays intact."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print_formatted_text(ANSI(self.format(record)))
        except Exception:
            self.handleError(record)


def should_use_color() -> bool:
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


def console_level() -> int:
    """Console level from COMMANDCORD_LOG_LEVEL, INFO when unset or unknown."""
    level = logging.getLevelName(os.getenv("COMMANDCORD_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def get_log_filepath() -> Path:
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    return LOGS_DIR / LOG_FILENAME


def setup_logger(logger_name: str) -> logging.Logger:
    """Attach the console and rotating file handlers to ``logger_name`` once."""
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console_handler = PromptToolkitHandler()
    console_handler.setLevel(console_level())
    formatter_cls = ColorFormatter if should_use_color() else logging.Formatter
    console_handler.setFormatter(formatter_cls(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        get_log_filepath(),
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


def get_logger(logger_name: str) -> logging.Logger:
    """Return the ``commandcord.<logger_name>`` logger, configuring it on first use."""
    return setup_logger(f"commandcord.{logger_name}")


def silence_library_loggers() -> None:
    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(logging.ERROR)
        library_logger.propagate = False
        library_logger.handlers = []


def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """sys.excepthook: log uncaught exceptions, leave Ctrl+C to the default hook."""
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
        return
    get_logger("uncaught").critical(
        "Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback)
    )


silence_library_loggers()
