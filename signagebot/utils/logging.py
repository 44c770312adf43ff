"""Logging configuration and setup utilities."""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from ..config.settings import SignageSettings

# Custom log level between INFO(20) and DEBUG(10)
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

LOG_LEVEL_CHOICES = ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]


def verbose(self: logging.Logger, message: Any, *args: Any, **kwargs: Any) -> None:
    """Add verbose() method to Logger class for detailed diagnostic logging.

    VERBOSE (15) sits between DEBUG and INFO: operational detail such as every
    navigation decision or capability call, without debug-level noise.

    Example:
        >>> logger = logging.getLogger(__name__)
        >>> logger.verbose("Capability %s completed", "toggleFullscreen")
    """
    if self.isEnabledFor(VERBOSE):
        self._log(VERBOSE, message, args, **kwargs)


# Add verbose method to all Logger instances
logging.Logger.verbose = verbose  # type: ignore[attr-defined]


def get_log_level(level_name: str) -> int:
    """Get numeric log level from string name, including custom VERBOSE level.

    Args:
        level_name: Log level name (DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Numeric log level value

    Raises:
        AttributeError: If level name is not recognized

    Example:
        >>> get_log_level("verbose")
        15
    """
    level_name = level_name.upper()
    if level_name == "VERBOSE":
        return VERBOSE
    level: int = getattr(logging, level_name)
    return level


# Escape sequences per level as (truecolor, basic) pairs
_LEVEL_COLORS = {
    "DEBUG": ("\033[95m", "\033[35m"),
    "VERBOSE": ("\033[92m", "\033[32m"),
    "INFO": ("\033[94m", "\033[34m"),
    "WARNING": ("\033[93m", "\033[33m"),
    "ERROR": ("\033[91m", "\033[31m"),
    "CRITICAL": ("\033[91m\033[1m", "\033[31m\033[1m"),
}
_RESET = "\033[0m"


class AutoColoredFormatter(logging.Formatter):
    """Formatter that colours the level name when the console supports it.

    ``color_mode`` is one of ``"truecolor"``, ``"basic"`` or ``"none"``.
    Signage boards usually log to journald rather than a TTY, so colours are
    off unless stdout is an interactive terminal.
    """

    def __init__(self, *args: Any, enable_colors: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.color_mode = detect_color_mode() if enable_colors else "none"

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        colors = _LEVEL_COLORS.get(record.levelname)
        if self.color_mode == "none" or colors is None:
            return formatted

        start = colors[0] if self.color_mode == "truecolor" else colors[1]
        return formatted.replace(record.levelname, f"{start}{record.levelname}{_RESET}", 1)


def detect_color_mode() -> str:
    """Work out what the attached terminal can display from TERM/COLORTERM."""
    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is None or not isatty():
        return "none"

    term = os.environ.get("TERM", "").lower()
    if term == "dumb":
        return "none"
    if os.environ.get("COLORTERM", "").lower() in ("truecolor", "24bit") or "256color" in term:
        return "truecolor"
    return "basic" if "color" in term else "none"


class TimestampedFileHandler(logging.FileHandler):
    """File handler writing one ``<prefix>_<YYYYmmdd_HHMMSS>.log`` per run.

    Opening the handler prunes the directory down to the ``max_files`` most
    recent logs for the same prefix, the new one included.
    """

    def __init__(
        self, log_dir: Union[str, Path], prefix: str = "signagebot", max_files: int = 5
    ) -> None:
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.max_files = max_files

        self.log_dir.mkdir(parents=True, exist_ok=True)
        started = datetime.now().strftime("%Y%m%d_%H%M%S")
        super().__init__(str(self.log_dir / f"{prefix}_{started}.log"), encoding="utf-8")

        self.cleanup_old_files()

    def cleanup_old_files(self) -> None:
        """Delete the oldest log files beyond ``max_files``."""
        current = Path(self.baseFilename)
        others = sorted(
            (path for path in self.log_dir.glob(f"{self.prefix}_*.log") if path != current),
            key=lambda path: path.stat().st_mtime,
            reverse=True,
        )
        for stale in others[max(self.max_files - 1, 0) :]:
            try:
                stale.unlink()
            except FileNotFoundError:
                continue  # removed by a concurrent run


def setup_logging(settings: "SignageSettings") -> logging.Logger:
    """Configure the ``signagebot`` logger hierarchy from settings.

    Console output uses :class:`AutoColoredFormatter`; file output (enabled by
    default, since nobody watches a signage console) goes to a timestamped
    file in ``settings.log_directory``.

    Args:
        settings: Resolved application settings

    Returns:
        The configured ``signagebot`` root logger
    """
    logger = logging.getLogger("signagebot")
    logger.setLevel(logging.DEBUG)  # handlers filter
    logger.handlers.clear()

    if settings.logging.console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(get_log_level(settings.logging.console_level))
        console_handler.setFormatter(
            AutoColoredFormatter(
                "%(asctime)s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S",
                enable_colors=settings.logging.console_colors,
            )
        )
        logger.addHandler(console_handler)

    if settings.logging.file_enabled:
        try:
            file_handler = TimestampedFileHandler(
                log_dir=settings.log_directory,
                prefix=settings.logging.file_prefix,
                max_files=settings.logging.max_log_files,
            )
        except OSError:
            logger.exception(f"Cannot open log directory {settings.log_directory}")
        else:
            file_handler.setLevel(get_log_level(settings.logging.file_level))
            if settings.logging.include_function_names:
                file_format = (
                    "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
                )
            else:
                file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            file_handler.setFormatter(logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S"))
            logger.addHandler(file_handler)
            logger.info(f"Logging to file: {file_handler.baseFilename}")

    third_party_level = get_log_level(settings.logging.third_party_level)
    for lib in ["PyQt6", "urllib3", "asyncio"]:
        logging.getLogger(lib).setLevel(third_party_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``signagebot`` namespace.

    Example:
        >>> get_logger("kiosk.bridge").name
        'signagebot.kiosk.bridge'
    """
    return logging.getLogger(f"signagebot.{name}")


def apply_command_line_overrides(settings: "SignageSettings", args: Any) -> "SignageSettings":
    """Apply command-line argument overrides to logging settings.

    Priority: Command-line > Environment > YAML > Defaults. Modifies the
    settings object in-place and returns it for convenience.
    """
    if getattr(args, "log_level", None):
        settings.logging.console_level = args.log_level
        settings.logging.file_level = args.log_level

    if getattr(args, "verbose", False):
        settings.logging.console_level = "VERBOSE"
        settings.logging.file_level = "VERBOSE"

    if getattr(args, "quiet", False):
        settings.logging.console_level = "ERROR"

    if getattr(args, "log_dir", None):
        settings.logging.file_directory = str(args.log_dir)

    if getattr(args, "no_log_colors", False):
        settings.logging.console_colors = False

    return settings
