"""CLI module for SignageBot.

This module provides the command-line interface: argument parsing and
execution of the kiosk session.
"""

from typing import Optional

from .modes.kiosk import run_kiosk_mode
from .parser import create_parser, parse_args


def main_entry(argv: Optional[list[str]] = None) -> int:
    """Main entry point with argument parsing.

    Args:
        argv: Argument list without the program name (defaults to ``sys.argv[1:]``)

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args, _ = parse_args(argv)
    return run_kiosk_mode(args)


__all__ = [
    "create_parser",
    "main_entry",
    "parse_args",
    "run_kiosk_mode",
]
