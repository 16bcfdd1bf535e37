"""Colorful console logging for remote_pool."""

import logging
import logging.handlers
import os
import re
import sys
from datetime import datetime

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "white": "\033[37m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Longest prefix first
COMPONENT_COLORS = {
    "remote_pool.services.registry": COLORS["bright_blue"],
    "remote_pool.services.pool": COLORS["bright_magenta"],
    "remote_pool.services": COLORS["bright_cyan"],
    "remote_pool.config": COLORS["green"],
    "remote_pool.models": COLORS["cyan"],
    "default": COLORS["white"],
}

TARGET_PATTERN = re.compile(r"([\w.\-]+@[\w.\-]+:\d+)")
POOL_SIZE_PATTERN = re.compile(r"(pool_size=\d+(?:/\d+)?)")
DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?m?s)\b")

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ["asyncssh", "asyncio"]

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class ColorfulFormatter(logging.Formatter):
    """Log formatter with colored levels and target highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created).astimezone()
        return f"{dt.strftime('%H:%M:%S')}.{int(record.msecs):03d} {dt.strftime('%m/%d')}"

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith("remote_pool."):
            name = name[len("remote_pool."):]
        return self._colorize(f"{name:<20}", self._get_component_color(record.name))

    def _highlight_message(self, message: str) -> str:
        """Highlight targets, pool sizes and durations."""
        if not self.use_colors:
            return message
        message = DURATION_PATTERN.sub(
            f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message
        )
        message = POOL_SIZE_PATTERN.sub(f"{COLORS['cyan']}\\1{COLORS['reset']}", message)
        message = TARGET_PATTERN.sub(
            f"{COLORS['bright_magenta']}\\1{COLORS['reset']}", message
        )
        return message

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a single colored line."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._colorize(
            f"{record.levelname:<8}", LEVEL_COLORS.get(record.levelname, COLORS["white"])
        )
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    level: str | None = None,
    use_colors: bool | None = None,
    log_file: str | None = None,
) -> logging.Logger:
    """Install the colorful formatter on the remote_pool logger.

    Args:
        level: Log level name, defaults to REMOTE_POOL_LOG_LEVEL or INFO
        use_colors: Force colors on or off, defaults to REMOTE_POOL_LOG_COLORS
            and whether stderr is a TTY
        log_file: Also write plain lines to this file, rotated at 5MB with
            5 backups; defaults to REMOTE_POOL_LOG_FILE

    Returns:
        The configured package logger
    """
    if level is None:
        level = os.getenv("REMOTE_POOL_LOG_LEVEL", "INFO")
    if use_colors is None:
        use_colors = os.getenv("REMOTE_POOL_LOG_COLORS", "true").lower() != "false"
        if not sys.stderr.isatty():
            use_colors = False
    if log_file is None:
        log_file = os.getenv("REMOTE_POOL_LOG_FILE") or None

    pool_logger = logging.getLogger("remote_pool")
    pool_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Only add handlers if not already configured
    if not pool_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        pool_logger.addHandler(handler)

        if log_file:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
            file_handler.setFormatter(ColorfulFormatter(use_colors=False))
            pool_logger.addHandler(file_handler)

        pool_logger.propagate = False

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    return pool_logger
