"""Kiosk mode handler for SignageBot CLI.

Resolves settings and the session configuration from launch flags, applies
platform tuning to the environment and hands the session to the Qt backend.
"""

import logging
import os
from typing import Any, Optional

from ...config import SettingsError, SignageSettings, load_settings
from ...kiosk.platform import PlatformInfo, apply_platform_tuning, build_platform_switches, detect_platform
from ...kiosk.session import SessionConfig, SessionContext, resolve_session_config
from ...utils.logging import apply_command_line_overrides, setup_logging

logger = logging.getLogger(__name__)


class KioskCLIError(Exception):
    """Exception raised for kiosk CLI-related errors."""


def _configure_settings(args: Any) -> SignageSettings:
    """Load settings and apply command-line overrides.

    Raises:
        KioskCLIError: If the settings cannot be constructed
    """
    overrides: dict[str, Any] = {}
    if getattr(args, "content", None):
        overrides["content_path"] = args.content

    try:
        settings = load_settings(config_file=getattr(args, "config", None), **overrides)
    except (SettingsError, ValueError) as e:
        raise KioskCLIError(f"Invalid configuration: {e}") from e

    return apply_command_line_overrides(settings, args)


def _setup_kiosk_logging(settings: SignageSettings, session: SessionConfig) -> logging.Logger:
    """Set up logging for a kiosk run.

    Unattended (non-dev) kiosk sessions always log to file and keep the
    console quieter.
    """
    if session.kiosk_mode and not session.dev_mode:
        settings.logging.file_enabled = True
        settings.logging.file_prefix = "kiosk"

    return setup_logging(settings)


def _log_startup_banner(
    logger_instance: logging.Logger, context: SessionContext, switches: list[str]
) -> None:
    config = context.config
    logger_instance.info("SignageBot starting...")
    logger_instance.info(f"Platform: {context.platform.platform} ({context.platform.architecture})")
    logger_instance.info(f"Version: {context.platform.app_version}")
    logger_instance.info(f"Kiosk mode: {config.kiosk_mode}")
    logger_instance.info(f"Development mode: {config.dev_mode}")
    logger_instance.info(f"Quit allowed: {config.quit_allowed}")
    logger_instance.info(f"Content: {context.content_url}")
    if switches:
        logger_instance.debug(f"Engine switches: {' '.join(switches)}")


def prepare_session(
    args: Any, platform_info: Optional[PlatformInfo] = None
) -> tuple[SessionContext, list[str]]:
    """Build the session context and apply platform tuning.

    Args:
        args: Parsed command line arguments
        platform_info: Detected platform (detected here when omitted)

    Returns:
        Tuple of (session context, engine switches added to the environment)

    Raises:
        KioskCLIError: If configuration is invalid or the content is missing
    """
    settings = _configure_settings(args)
    platform_info = platform_info or detect_platform()
    session = resolve_session_config(args, platform_info)
    context = SessionContext(config=session, platform=platform_info, settings=settings)

    logger_instance = _setup_kiosk_logging(settings, session)

    # Must happen before the QApplication is constructed
    added = apply_platform_tuning(build_platform_switches(platform_info), os.environ)

    _log_startup_banner(logger_instance, context, added)

    content_path = settings.resolved_content_path
    if not content_path.is_file():
        raise KioskCLIError(f"Content not found: {content_path}")

    return context, added


def run_kiosk_mode(args: Any) -> int:
    """Run SignageBot in kiosk mode.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        context, _ = prepare_session(args)
    except KioskCLIError as e:
        logger.error(str(e))
        print(f"Error: {e}")
        return 1

    # Qt is only needed once the session is ready to run
    from ...kiosk.surface import run_kiosk  # noqa: PLC0415

    return run_kiosk(context)
