"""
Kiosk session controller - wires the kiosk components onto one event queue.

Classes:
    SessionController: Owns the components of one session and applies their effects
    SessionStatus: Snapshot of session health for logging and diagnostics

Example:
    >>> controller = SessionController(context, backend)
    >>> controller.start()            # creates the hidden surface, loads content
    >>> controller.post(ContentReady())
    >>> controller.get_status().window.lifecycle
    <WindowLifecycle.SHOWN: 'shown'>
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from ..utils.logging import get_logger
from .backend import SurfaceBackend
from .bridge import CapabilityBridge, CapabilityRequest, CapabilityResponse
from .display import DisplayManager, WindowState
from .effects import (
    CreateSurface,
    Effect,
    FocusSurface,
    InstallBridge,
    LoadContent,
    OpenDiagnostics,
    ReleaseSurface,
    SetFullscreen,
    ShowSurface,
    TerminateProcess,
)
from .events import (
    Activate,
    AppReady,
    AuxiliarySurfaceRequest,
    CapabilityInvoked,
    ContentProcessGone,
    ContentReady,
    Event,
    EventDispatcher,
    LocationCommitted,
    NavigationAttempt,
    QuitRequested,
    SurfaceClosed,
)
from .lifecycle import LifecyclePolicy, LifecycleState, RecoveryHook
from .navigation import NavigationDecision, NavigationGuard, Verdict
from .session import SessionContext

logger = logging.getLogger(__name__)

# Platform where the process outlives its last surface
_PERSISTENT_APP_PLATFORM = "darwin"


@dataclass
class SessionStatus:
    """Session health snapshot.

    Attributes:
        start_time: When the session started (None before start())
        uptime: Time since start (None before start())
        window: Current surface state
        lifecycle: Process lifecycle state
        fault_count: Host faults survived
        last_fault: Description of the most recent fault
        suppressed_quits: Quit requests that were blocked
        denied_navigations: Navigation and new-window attempts denied
        capability_invocations: Capability requests processed
        content_process_exits: Renderer terminations observed
    """

    start_time: Optional[datetime]
    uptime: Optional[timedelta]
    window: WindowState
    lifecycle: LifecycleState
    fault_count: int
    last_fault: Optional[str]
    suppressed_quits: int
    denied_navigations: int
    capability_invocations: int
    content_process_exits: int


class SessionController:
    """Central coordinator for one kiosk session.

    Builds every component from the same :class:`SessionContext`, registers
    one handler per event type and applies the effects returned by the
    components to the attached backend, in order.
    """

    def __init__(
        self,
        context: SessionContext,
        backend: SurfaceBackend,
        recovery_hook: Optional[RecoveryHook] = None,
    ) -> None:
        self.context = context
        self.backend = backend
        self.logger = get_logger("kiosk.controller")

        self.lifecycle = LifecyclePolicy(context, recovery_hook)
        self.display = DisplayManager(context)
        self.navigation = NavigationGuard(context)
        self.bridge = CapabilityBridge(context, self.display, self.lifecycle)

        self.dispatcher = EventDispatcher(fault_handler=self.lifecycle.handle_fault)
        self.dispatcher.register(AppReady, self._on_app_ready)
        self.dispatcher.register(ContentReady, self._on_content_ready)
        self.dispatcher.register(LocationCommitted, self._on_location_committed)
        self.dispatcher.register(NavigationAttempt, self._on_navigation_attempt)
        self.dispatcher.register(AuxiliarySurfaceRequest, self._on_auxiliary_surface_request)
        self.dispatcher.register(SurfaceClosed, self._on_surface_closed)
        self.dispatcher.register(Activate, self._on_activate)
        self.dispatcher.register(QuitRequested, self._on_quit_requested)
        self.dispatcher.register(CapabilityInvoked, self._on_capability_invoked)
        self.dispatcher.register(ContentProcessGone, self._on_content_process_gone)

        self._effect_appliers: dict[type, Callable[[Any], None]] = {
            CreateSurface: self.backend.create_surface,
            InstallBridge: self.backend.install_bridge,
            LoadContent: lambda effect: self.backend.load_content(effect.url),
            ShowSurface: lambda effect: self.backend.show(),
            FocusSurface: lambda effect: self.backend.focus(),
            OpenDiagnostics: lambda effect: self.backend.open_diagnostics(),
            SetFullscreen: lambda effect: self.backend.set_fullscreen(effect.active),
            ReleaseSurface: lambda effect: self.backend.release_surface(),
            TerminateProcess: lambda effect: self.backend.terminate(effect.exit_code),
        }

        self._start_time: Optional[datetime] = None

    # Public API used by backends

    def start(self) -> None:
        """Begin the session: create the surface and load content."""
        self._start_time = datetime.now()
        self.post(AppReady())

    def post(self, event: Event) -> None:
        """Queue an event for the session's dispatcher."""
        self.dispatcher.post(event)

    def decide_navigation(self, target: str) -> NavigationDecision:
        """Synchronously obtain a navigation verdict.

        If the verdict cannot be produced right away (the dispatcher is busy
        with another event) the navigation is denied and never queued.
        """
        if self.dispatcher.is_dispatching:
            self.logger.warning(f"Navigation to {target} denied: session busy")
            return NavigationDecision(target, None, Verdict.DENY, "no decision available")

        decisions: list[NavigationDecision] = []
        self.post(NavigationAttempt(target=target, reply=decisions.append))
        return decisions[0]

    def decide_auxiliary_surface(self, target: str) -> NavigationDecision:
        """Synchronously obtain the (always denying) verdict for a new window."""
        if self.dispatcher.is_dispatching:
            self.logger.warning(f"New window for {target} denied: session busy")
            return NavigationDecision(target, None, Verdict.DENY, "no decision available")

        decisions: list[NavigationDecision] = []
        self.post(AuxiliarySurfaceRequest(target=target, reply=decisions.append))
        return decisions[0]

    def invoke_capability(self, request: CapabilityRequest) -> Optional[CapabilityResponse]:
        """Run a capability request and return its response.

        A request arriving while the dispatcher is busy is dropped without
        side effects, so the failure reported to content is the real outcome.

        Returns:
            The response, or None if the request was dropped
        """
        if self.dispatcher.is_dispatching:
            self.logger.warning(f"Capability {request.operation} dropped: session busy")
            return None

        responses: list[CapabilityResponse] = []
        self.post(CapabilityInvoked(request=request, reply=responses.append))
        return responses[0]

    def get_status(self) -> SessionStatus:
        """Get a snapshot of the session's health counters."""
        uptime = datetime.now() - self._start_time if self._start_time else None
        return SessionStatus(
            start_time=self._start_time,
            uptime=uptime,
            window=self.display.state,
            lifecycle=self.lifecycle.state,
            fault_count=self.lifecycle.fault_count,
            last_fault=self.lifecycle.last_fault,
            suppressed_quits=self.lifecycle.suppressed_quits,
            denied_navigations=self.navigation.denied_count,
            capability_invocations=self.bridge.invocation_count,
            content_process_exits=self.lifecycle.content_process_exits,
        )

    # Handlers

    def _create_surface(self) -> None:
        effects = self.display.create(self.backend.primary_work_area())
        effects.append(
            InstallBridge(
                dev_mode=self.context.config.dev_mode,
                host_version=self.context.platform.app_version,
            )
        )
        effects.append(LoadContent(self.context.content_url))
        self._apply(effects)

    def _on_app_ready(self, event: AppReady) -> None:
        if self.display.has_surface:
            return
        self._create_surface()

    def _on_content_ready(self, event: ContentReady) -> None:
        self._apply(self.display.present_when_ready())

    def _on_location_committed(self, event: LocationCommitted) -> None:
        self.display.commit_location(event.url)

    def _on_navigation_attempt(self, event: NavigationAttempt) -> None:
        decision = self.navigation.evaluate_navigation(event.target)
        if event.reply is not None:
            event.reply(decision)

    def _on_auxiliary_surface_request(self, event: AuxiliarySurfaceRequest) -> None:
        decision = self.navigation.evaluate_auxiliary_surface(event.target)
        if event.reply is not None:
            event.reply(decision)

    def _on_surface_closed(self, event: SurfaceClosed) -> None:
        self._apply(self.display.destroy())
        if self.context.platform.platform != _PERSISTENT_APP_PLATFORM:
            self.post(QuitRequested(source="last surface closed"))

    def _on_activate(self, event: Activate) -> None:
        if self.display.has_surface or self.lifecycle.state is LifecycleState.TERMINATED:
            return
        self.logger.info("Application activated without a surface, creating a new one")
        self._create_surface()

    def _on_quit_requested(self, event: QuitRequested) -> None:
        self._apply(self.lifecycle.request_quit(event.source))

    def _on_capability_invoked(self, event: CapabilityInvoked) -> None:
        response, effects = self.bridge.invoke(event.request)
        if event.reply is not None:
            event.reply(response)
        self._apply(effects)

    def _on_content_process_gone(self, event: ContentProcessGone) -> None:
        self._apply(self.lifecycle.on_content_process_gone(event))

    def _apply(self, effects: list[Effect]) -> None:
        for effect in effects:
            self._effect_appliers[type(effect)](effect)
