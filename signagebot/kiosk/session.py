"""
Session configuration and the per-session context object.

``SessionConfig`` is resolved once from launch flags and host platform and is
frozen afterwards. ``SessionContext`` bundles it with platform identity and
settings and is handed explicitly to every component constructor.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import SignageSettings
from .platform import PlatformInfo

logger = logging.getLogger(__name__)


class SessionConfig(BaseModel):
    """Immutable startup configuration for one kiosk session.

    Attributes:
        kiosk_mode: Lock the surface into kiosk presentation
        fullscreen: Surface starts fullscreen (always true for signage)
        framed: Draw native window chrome (always false for signage)
        dev_mode: Relax quit suppression, open diagnostics, allow context menu
        allow_explicit_quit: Let quit requests succeed outside dev mode
    """

    model_config = ConfigDict(frozen=True)

    kiosk_mode: bool = Field(default=False, description="Kiosk presentation mode")
    fullscreen: bool = Field(default=True, description="Start fullscreen")
    framed: bool = Field(default=False, description="Native window chrome")
    dev_mode: bool = Field(default=False, description="Developer mode")
    allow_explicit_quit: bool = Field(default=False, description="Quit override flag")

    @property
    def quit_allowed(self) -> bool:
        return self.dev_mode or self.allow_explicit_quit


def resolve_session_config(args: Any, platform_info: PlatformInfo) -> SessionConfig:
    """Resolve the session configuration from parsed launch flags.

    Resolution cannot fail: missing attributes count as absent flags.

    Args:
        args: Parsed launch flags (``argparse.Namespace``)
        platform_info: Detected host platform

    Returns:
        Frozen session configuration
    """
    kiosk_flag = bool(getattr(args, "kiosk", False))
    dev_flag = bool(getattr(args, "dev", False))
    allow_quit_flag = bool(getattr(args, "allow_quit", False))

    return SessionConfig(
        kiosk_mode=kiosk_flag or platform_info.is_embedded_target,
        fullscreen=True,
        framed=False,
        dev_mode=dev_flag,
        allow_explicit_quit=allow_quit_flag,
    )


@dataclass(frozen=True)
class SessionContext:
    """Everything a kiosk component needs to know about its session.

    Attributes:
        config: Resolved session configuration
        platform: Host platform identity
        settings: Application settings
    """

    config: SessionConfig
    platform: PlatformInfo
    settings: SignageSettings

    @property
    def content_url(self) -> str:
        return self.settings.content_url
