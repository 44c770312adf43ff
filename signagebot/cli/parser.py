"""Command-line argument parsing for SignageBot.

Flags are matched exactly: abbreviations are disabled and anything the
parser does not know (for example switches a launcher passes through to the
rendering engine) is ignored rather than rejected.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from .. import __version__
from ..utils.logging import LOG_LEVEL_CHOICES

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser for the kiosk shell.

    Returns:
        argparse.ArgumentParser: Configured parser with session, content and
            logging options

    Example:
        >>> parser = create_parser()
        >>> args, _ = parser.parse_known_args(["--kiosk", "--allow-quit"])
        >>> args.kiosk, args.allow_quit
        (True, True)
    """
    parser = argparse.ArgumentParser(
        prog="signagebot",
        description="SignageBot - unattended digital-signage kiosk shell",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Examples:
  %(prog)s                           # Show ./index.html (kiosk mode on Linux)
  %(prog)s --kiosk                   # Force kiosk presentation on any platform
  %(prog)s --dev                     # Developer mode: DevTools, context menu, quit allowed
  %(prog)s --allow-quit              # Let content or signals terminate the process
  %(prog)s --content /opt/signage/index.html --log-dir /var/log/signagebot
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show version information"
    )

    # Session flags
    session_group = parser.add_argument_group("session", "Kiosk session options")

    session_group.add_argument(
        "--kiosk",
        action="store_true",
        help="Lock the surface into kiosk presentation (always on for Linux)",
    )

    session_group.add_argument(
        "--dev",
        action="store_true",
        help="Developer mode: open DevTools, keep the context menu, allow quitting",
    )

    session_group.add_argument(
        "--allow-quit",
        dest="allow_quit",
        action="store_true",
        help="Allow quit requests to terminate the process outside developer mode",
    )

    # Content and configuration
    content_group = parser.add_argument_group("content", "Content and configuration files")

    content_group.add_argument(
        "--content",
        type=Path,
        metavar="PATH",
        help="Signage entry document to display (default: ./index.html)",
    )

    content_group.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="YAML configuration file (default: ./config/config.yaml or ~/.config/signagebot/config.yaml)",
    )

    # Logging arguments
    logging_group = parser.add_argument_group("logging", "Logging configuration options")

    logging_group.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        help="Set both console and file log levels",
    )

    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging and detailed output"
    )

    logging_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only show errors on console (sets console level to ERROR)",
    )

    logging_group.add_argument("--log-dir", type=Path, help="Custom directory for log files")

    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )

    return parser


def parse_args(argv: Optional[list[str]] = None) -> tuple[argparse.Namespace, list[str]]:
    """Parse launch flags, ignoring unknown ones.

    Args:
        argv: Argument list without the program name (defaults to ``sys.argv[1:]``)

    Returns:
        Tuple of (parsed namespace, unrecognised arguments)
    """
    args, unknown = create_parser().parse_known_args(argv)
    if unknown:
        logger.debug(f"Ignoring unrecognised arguments: {' '.join(unknown)}")
    return args, unknown
