"""Logging configuration for Bandwidth Tracker.

Rotating file log in the data directory plus optional colored stderr
output. Every module gets its logger through get_logger().

Usage:
    from config.logging_config import setup_logging, get_logger

    setup_logging(data_dir=Path.home() / ".bandwidth-tracker")

    logger = get_logger(__name__)
    logger.info("Sampler started")
"""
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.constants import STORAGE

ROOT_LOGGER_NAME = 'bwtrack'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Module-level logger cache
_loggers: dict = {}
_initialized: bool = False


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if self.use_colors and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, '')
            reset = self.COLORS['RESET']
            # Copy so the file handler still sees the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{reset}"
        return super().format(record)


def setup_logging(
    data_dir: Optional[Path] = None,
    debug: bool = False,
    console_output: bool = True,
    log_to_file: bool = True
) -> logging.Logger:
    """Initialize the logging system.

    Safe to call more than once; handlers are replaced, not stacked.

    Args:
        data_dir: Directory for the log file. Defaults to ~/.bandwidth-tracker/
        debug: Enable debug-level logging.
        console_output: Also log to stderr.
        log_to_file: Write logs to a rotating file.

    Returns:
        The root logger for the application.
    """
    global _initialized

    if data_dir is None:
        data_dir = Path.home() / STORAGE.DATA_DIR_NAME

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.handlers.clear()

    if log_to_file:
        data_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            data_dir / STORAGE.LOG_FILE,
            maxBytes=STORAGE.LOG_MAX_BYTES,
            backupCount=STORAGE.LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
        console_handler.setFormatter(ColoredFormatter(use_colors=True))
        root_logger.addHandler(console_handler)

    root_logger.info(
        f"Logging initialized - level={'DEBUG' if debug else 'INFO'}, "
        f"file={log_to_file}, console={console_output}"
    )

    _initialized = True
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a child of the 'bwtrack' logger for a module.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        A logger named 'bwtrack.<last two dotted parts of name>'.
    """
    parts = name.split('.')
    short_name = '.'.join(parts[-2:])

    if short_name not in _loggers:
        if not _initialized:
            # Fallback so early log records are not lost before setup_logging()
            logging.basicConfig(level=logging.INFO)
        _loggers[short_name] = logging.getLogger(f'{ROOT_LOGGER_NAME}.{short_name}')

    return _loggers[short_name]


def log_exception(logger: logging.Logger, message: str, exc: Exception) -> None:
    """Log an exception with full traceback and context.

    Example:
        >>> try:
        ...     controller.tick()
        ... except Exception as e:
        ...     log_exception(logger, "Tick failed", e)
    """
    logger.error(
        f"{message}: {type(exc).__name__}: {exc}",
        exc_info=True,
        extra={'exception_type': type(exc).__name__}
    )


class LogContext:
    """Context manager for logging operation duration.

    Example:
        >>> with LogContext(logger, "State save"):
        ...     store.save(state)
        # Logs: "State save completed in 3ms"
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (time.perf_counter() - self.start_time) * 1000

        if exc_type:
            self.logger.error(
                f"{self.operation} failed after {duration:.0f}ms: {exc_val}"
            )
        else:
            self.logger.log(
                self.level,
                f"{self.operation} completed in {duration:.0f}ms"
            )

        return False  # Don't suppress exceptions
