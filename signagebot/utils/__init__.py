"""Utility functions and helpers package."""

from .logging import (
    LOG_LEVEL_CHOICES,
    VERBOSE,
    AutoColoredFormatter,
    TimestampedFileHandler,
    apply_command_line_overrides,
    detect_color_mode,
    get_log_level,
    get_logger,
    setup_logging,
)

__all__ = [
    "LOG_LEVEL_CHOICES",
    "VERBOSE",
    "AutoColoredFormatter",
    "TimestampedFileHandler",
    "apply_command_line_overrides",
    "detect_color_mode",
    "get_log_level",
    "get_logger",
    "setup_logging",
]
