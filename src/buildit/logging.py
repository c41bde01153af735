"""Logging setup for the BuildIt! server.

Every consumer thread, the HTTP API and the chatty client libraries (httpx,
kombu) write to one rotating log file. Bot tokens travel in Telegram API
URLs and broker passwords in AMQP URLs, so every handler redacts credentials
from the rendered message.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "buildit.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# httpx logs every request line at INFO, including the Telegram long poll
LIBRARY_LOGGERS = ("httpx", "httpcore", "kombu", "amqp")
DEFAULT_LIBRARY_LEVEL = "WARNING"

REDACTIONS = [
    (re.compile(r"ghp_[a-zA-Z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"ghs_[a-zA-Z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"github_pat_[a-zA-Z0-9_]{82}"), "[GITHUB_TOKEN]"),
    (re.compile(r"bot\d+:[a-zA-Z0-9_-]{35}"), "bot[TELEGRAM_TOKEN]"),
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"(amqps?://[^:/@]+:)[^@]+@"), r"\1[REDACTED]@"),
]


def sanitize_for_log(text: str) -> str:
    """Remove credentials from text before it is logged.

    Args:
        text: Text that may contain tokens, e.g. a broker URL or an API path.

    Returns:
        The text with GitHub tokens, Telegram bot tokens, bearer tokens and
        broker passwords replaced by placeholders.
    """
    for pattern, replacement in REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class RedactingFilter(logging.Filter):
    """Handler filter that redacts credentials from the final message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = sanitize_for_log(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _make_handlers(
    log_path: Path, max_bytes: int, backup_count: int, console: bool
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())
    return handlers


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
    library_level: str = DEFAULT_LIBRARY_LEVEL,
) -> logging.Logger:
    """Configure the ``buildit`` logger and the client library loggers.

    Calling it again replaces the handlers instead of adding more.

    Args:
        log_dir: Directory for log files. Defaults to BUILDIT_LOG_DIR or ./logs.
        log_file: Log file name.
        max_bytes: Size at which the file is rotated.
        backup_count: Number of rotated files to keep.
        level: Level name for BuildIt! loggers. Defaults to BUILDIT_LOG_LEVEL
            or INFO.
        console: Also log to stderr.
        library_level: Level name for httpx, kombu and amqp.

    Returns:
        The ``buildit`` logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("BUILDIT_LOG_DIR", DEFAULT_LOG_DIR)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        level = os.environ.get("BUILDIT_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    log_path = log_dir / log_file
    handlers = _make_handlers(log_path, max_bytes, backup_count, console)

    logger = logging.getLogger("buildit")
    logger.setLevel(log_level)
    for old in logger.handlers:
        old.close()
    logger.handlers = list(handlers)

    for name in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(getattr(logging, library_level.upper(), logging.WARNING))
        library_logger.handlers = list(handlers)
        library_logger.propagate = False

    logger.info("Logging to %s at %s", log_path, logging.getLevelName(log_level))
    return logger

