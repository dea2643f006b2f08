"""Shared utilities."""

from .logger import (
    Logger,
    get_logger,
    setup_logging,
    get_log_buffer,
    clear_log_buffer,
)

__all__ = [
    'Logger',
    'get_logger',
    'setup_logging',
    'get_log_buffer',
    'clear_log_buffer',
]
