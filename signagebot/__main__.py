"""Entry point for `python -m signagebot` command.

Delegates to the CLI module; also used as the ``signagebot`` console script.
"""

import logging
import sys

logger = logging.getLogger(__name__)

try:
    from signagebot.cli import main_entry
except ImportError:
    logger.exception("Error importing main entry point")
    logger.info("Make sure SignageBot and its dependencies are installed.")
    sys.exit(1)


def main() -> None:
    """Entry point for python -m signagebot."""
    try:
        exit_code = main_entry()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("Operation cancelled by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
