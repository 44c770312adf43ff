"""
Effects requested by kiosk components.

Components never touch the rendering backend directly. Transitions return a
list of these values and the controller applies them, in order, to whichever
``SurfaceBackend`` is attached.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class CreateSurface:
    """Construct the single, initially hidden, rendering surface."""

    width: int
    height: int
    framed: bool
    fullscreen: bool
    kiosk: bool
    background_color: str


@dataclass(frozen=True)
class InstallBridge:
    """Register the capability channel; must precede ``LoadContent``."""

    dev_mode: bool
    host_version: str


@dataclass(frozen=True)
class LoadContent:
    url: str


@dataclass(frozen=True)
class ShowSurface:
    pass


@dataclass(frozen=True)
class FocusSurface:
    pass


@dataclass(frozen=True)
class OpenDiagnostics:
    """Open the web inspector next to the surface (developer mode only)."""


@dataclass(frozen=True)
class SetFullscreen:
    active: bool


@dataclass(frozen=True)
class ReleaseSurface:
    """Drop the backend's reference to a surface the OS already closed."""


@dataclass(frozen=True)
class TerminateProcess:
    exit_code: int = 0


Effect = Union[
    CreateSurface,
    InstallBridge,
    LoadContent,
    ShowSurface,
    FocusSurface,
    OpenDiagnostics,
    SetFullscreen,
    ReleaseSurface,
    TerminateProcess,
]
