"""
Logging for the rule validation service.

Every module takes its logger from ``get_logger(__name__)``, which hangs it
under the ``rules_engine`` logger. That logger owns the handlers configured
in the ``logging`` settings section (console and an optional daily-rotated
file) plus an in-memory buffer served at ``/api/v1/logs``.
"""

import logging
import logging.handlers
import sys
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional

from src.config.settings import LoggingConfig, get_settings


ROOT_LOGGER_NAME = "rules_engine"
BUFFER_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
SCRIPT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class LogBufferHandler(logging.Handler):
    """
    Logging handler that keeps the most recent formatted records in memory.

    Once ``capacity`` lines are held the oldest line is dropped for each
    new one.
    """

    def __init__(self, capacity: int = 100):
        super().__init__()
        self.records: Deque[str] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.records.append(self.format(record))
        except Exception:
            self.handleError(record)


def _build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    """Create the file and console handlers enabled in ``config``."""
    handlers: List[logging.Handler] = []

    if config.file_enabled:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            path,
            when='midnight',
            backupCount=config.file_backup_count,
            encoding='utf-8',
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setLevel(_level(config.level))
        handlers.append(file_handler)

    if config.console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(_level(config.console_level))
        handlers.append(console_handler)

    formatter = logging.Formatter(config.format)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


class Logger:
    """Process-wide owner of the ``rules_engine`` logger and its handlers."""

    _instance: Optional['Logger'] = None

    def __new__(cls) -> 'Logger':
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._configure(get_settings().logging)
            cls._instance = instance
        return cls._instance

    def _configure(self, config: LoggingConfig) -> None:
        self.logger = logging.getLogger(ROOT_LOGGER_NAME)
        self.logger.setLevel(_level(config.level))
        # Own handlers only; scripts may add root handlers via setup_logging
        self.logger.propagate = False
        self.logger.handlers.clear()

        for handler in _build_handlers(config):
            self.logger.addHandler(handler)

        self.buffer = LogBufferHandler(config.buffer_size)
        self.buffer.setLevel(_level(config.level))
        self.buffer.setFormatter(logging.Formatter(BUFFER_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        self.logger.addHandler(self.buffer)

    def get_logger(self, name: str) -> logging.Logger:
        """Child logger for a module, e.g. ``rules_engine.src.rules.validator``."""
        return self.logger.getChild(name)


def get_logger(name: str) -> logging.Logger:
    """Get a service logger for a module."""
    return Logger().get_logger(name)


def get_log_buffer() -> List[str]:
    """Recent log lines, oldest first."""
    return list(Logger().buffer.records)


def clear_log_buffer() -> None:
    Logger().buffer.records.clear()


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None,
) -> None:
    """
    Console logging for scripts under ``tools/``.

    Configures the root logger and applies ``level`` to the service logger
    and its output handlers, so ``--verbose`` shows the validators' debug
    messages.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.WARNING)
        format_str: Custom format string for the root handler
    """
    logging.basicConfig(
        level=level,
        format=format_str or SCRIPT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    service_logger = Logger().logger
    service_logger.setLevel(level)
    for handler in service_logger.handlers:
        if not isinstance(handler, LogBufferHandler):
            handler.setLevel(level)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
