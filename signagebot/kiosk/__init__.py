"""
SignageBot Kiosk Session Module.

This module provides the kiosk session controller for unattended signage
displays: one locked-down fullscreen surface, navigation lockdown, a closed
set of content capabilities, and quit/crash resilience.

Components:
    SessionController: Wires the components below onto one event queue
    SessionConfig: Immutable launch configuration
    DisplayManager: Single-surface window lifecycle
    NavigationGuard: Origin allow-list for the surface
    LifecyclePolicy: Quit suppression and fault survival
    CapabilityBridge: Host operations available to content

The Qt backend (``signagebot.kiosk.surface``) is not imported here so the
components can be used without a display.
"""

from .bridge import CapabilityBridge, CapabilityOperation, CapabilityRequest, CapabilityResponse
from .controller import SessionController, SessionStatus
from .display import DisplayManager, Geometry, WindowLifecycle, WindowState
from .exceptions import CapabilityError, DisplayStateError, KioskError, SurfaceBackendError
from .lifecycle import LifecyclePolicy, LifecycleState, NoRecovery
from .navigation import NavigationDecision, NavigationGuard, Verdict
from .platform import PlatformInfo, apply_platform_tuning, build_platform_switches, detect_platform
from .session import SessionConfig, SessionContext, resolve_session_config

__all__ = [
    "CapabilityBridge",
    "CapabilityError",
    "CapabilityOperation",
    "CapabilityRequest",
    "CapabilityResponse",
    "DisplayManager",
    "DisplayStateError",
    "Geometry",
    "KioskError",
    "LifecyclePolicy",
    "LifecycleState",
    "NavigationDecision",
    "NavigationGuard",
    "NoRecovery",
    "PlatformInfo",
    "SessionConfig",
    "SessionContext",
    "SessionController",
    "SessionStatus",
    "SurfaceBackendError",
    "Verdict",
    "WindowLifecycle",
    "WindowState",
    "apply_platform_tuning",
    "build_platform_switches",
    "detect_platform",
    "resolve_session_config",
]

__version__ = "1.0.0"
