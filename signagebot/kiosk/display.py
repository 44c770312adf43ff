"""
Display manager for the single signage surface.

The window lifecycle is modelled as pure transition functions over an
immutable ``WindowState``; each returns the next state and the effects the
backend must perform. ``DisplayManager`` is the only object that holds (and
therefore the only one that mutates) the current state.

Lifecycle:
    UNINITIALIZED --create--> CREATED --content ready--> SHOWN
    CREATED | SHOWN --closed--> DESTROYED (terminal for that state)

A surface created after DESTROYED starts from a brand-new ``WindowState``.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..utils.logging import get_logger
from .effects import (
    CreateSurface,
    Effect,
    FocusSurface,
    OpenDiagnostics,
    ReleaseSurface,
    SetFullscreen,
    ShowSurface,
)
from .exceptions import DisplayStateError
from .session import SessionContext

logger = logging.getLogger(__name__)


class WindowLifecycle(Enum):
    """Surface lifecycle states.

    Attributes:
        UNINITIALIZED: No surface has been created yet
        CREATED: Surface exists but is hidden until content is ready
        SHOWN: Surface is visible and focused
        DESTROYED: Surface was closed by the OS
    """

    UNINITIALIZED = "uninitialized"
    CREATED = "created"
    SHOWN = "shown"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class Geometry:
    """Primary screen work area in pixels."""

    width: int
    height: int


@dataclass(frozen=True)
class WindowState:
    """Snapshot of the signage surface.

    Attributes:
        lifecycle: Current lifecycle state
        fullscreen_active: Whether the surface is fullscreen
        focused: Whether the surface has input focus
        location: URL committed in the surface (None before the first load)
        geometry: Work-area size the surface was created with
    """

    lifecycle: WindowLifecycle = WindowLifecycle.UNINITIALIZED
    fullscreen_active: bool = False
    focused: bool = False
    location: Optional[str] = None
    geometry: Optional[Geometry] = None

    @property
    def is_live(self) -> bool:
        return self.lifecycle in (WindowLifecycle.CREATED, WindowLifecycle.SHOWN)


def create_transition(
    state: WindowState, context: SessionContext, work_area: Geometry
) -> tuple[WindowState, list[Effect]]:
    """UNINITIALIZED | DESTROYED -> CREATED.

    Raises:
        DisplayStateError: If a live surface already exists
    """
    if state.is_live:
        raise DisplayStateError(
            f"A surface already exists (state: {state.lifecycle.value})", "SURFACE_EXISTS"
        )

    config = context.config
    new_state = WindowState(
        lifecycle=WindowLifecycle.CREATED,
        fullscreen_active=config.fullscreen,
        focused=False,
        location=None,
        geometry=work_area,
    )
    effects: list[Effect] = [
        CreateSurface(
            width=work_area.width,
            height=work_area.height,
            framed=config.framed,
            fullscreen=config.fullscreen,
            kiosk=config.kiosk_mode,
            background_color=context.settings.background_color,
        )
    ]
    return new_state, effects


def present_transition(
    state: WindowState, context: SessionContext
) -> tuple[WindowState, list[Effect]]:
    """CREATED -> SHOWN once content is ready; any other state is left alone."""
    if state.lifecycle is not WindowLifecycle.CREATED:
        return state, []

    effects: list[Effect] = [ShowSurface(), FocusSurface()]
    if context.config.dev_mode:
        effects.append(OpenDiagnostics())

    return replace(state, lifecycle=WindowLifecycle.SHOWN, focused=True), effects


def toggle_fullscreen_transition(state: WindowState) -> tuple[WindowState, list[Effect], bool]:
    """Flip fullscreen; without a live surface nothing changes and the result is False."""
    if not state.is_live:
        return state, [], False

    active = not state.fullscreen_active
    return replace(state, fullscreen_active=active), [SetFullscreen(active)], active


def destroy_transition(state: WindowState) -> tuple[WindowState, list[Effect]]:
    """CREATED | SHOWN -> DESTROYED."""
    if not state.is_live:
        return state, []
    return replace(state, lifecycle=WindowLifecycle.DESTROYED, focused=False), [ReleaseSurface()]


class DisplayManager:
    """Owner of the single signage surface state.

    Example:
        >>> display = DisplayManager(context)
        >>> effects = display.create(Geometry(1920, 1080))
        >>> display.state.lifecycle
        <WindowLifecycle.CREATED: 'created'>
    """

    def __init__(self, context: SessionContext) -> None:
        self.context = context
        self._state = WindowState()
        self.logger = get_logger("kiosk.display")

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def has_surface(self) -> bool:
        return self._state.is_live

    def create(self, work_area: Geometry) -> list[Effect]:
        """Create the hidden surface sized to the primary screen work area.

        Raises:
            DisplayStateError: If a live surface already exists
        """
        self._state, effects = create_transition(self._state, self.context, work_area)
        self.logger.info(
            f"Surface created {work_area.width}x{work_area.height} "
            f"(kiosk={self.context.config.kiosk_mode}, framed={self.context.config.framed})"
        )
        return effects

    def present_when_ready(self) -> list[Effect]:
        """Show and focus the surface after content signalled it is ready."""
        previous = self._state.lifecycle
        self._state, effects = present_transition(self._state, self.context)

        if effects:
            self.logger.info("Content ready, surface shown")
        else:
            self.logger.debug(f"Ignoring ready signal in state {previous.value}")
        return effects

    def toggle_fullscreen(self) -> tuple[bool, list[Effect]]:
        """Flip fullscreen.

        Returns:
            Tuple of (new fullscreen state, effects). ``(False, [])`` when no
            surface exists.
        """
        self._state, effects, active = toggle_fullscreen_transition(self._state)
        if effects:
            self.logger.info(f"Fullscreen {'enabled' if active else 'disabled'}")
        return active, effects

    def commit_location(self, url: str) -> None:
        """Record the location the surface actually committed."""
        if self._state.is_live:
            self._state = replace(self._state, location=url)

    def destroy(self) -> list[Effect]:
        """Mark the surface destroyed and release it."""
        self._state, effects = destroy_transition(self._state)
        if effects:
            self.logger.info("Surface destroyed")
        return effects
