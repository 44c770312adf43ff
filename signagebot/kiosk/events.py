"""
Host events and the single-threaded dispatcher that runs them.

Every interaction with the kiosk core - the host becoming ready, content
signalling it can paint, a navigation attempt, a capability call, a quit
request - is posted as one of the event types below. ``EventDispatcher``
drains them in FIFO order, one at a time, each handler running to completion
before the next event starts. An event posted from inside a handler is queued,
never nested.
"""

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from .bridge import CapabilityRequest, CapabilityResponse
    from .navigation import NavigationDecision

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppReady:
    """The host toolkit is initialised and a surface may be created."""


@dataclass(frozen=True)
class ContentReady:
    """The bundled content finished its first load and can be painted."""


@dataclass(frozen=True)
class LocationCommitted:
    """The surface committed a new location."""

    url: str


@dataclass(frozen=True)
class NavigationAttempt:
    """Content tries to navigate the surface to ``target``."""

    target: str
    reply: Optional[Callable[["NavigationDecision"], None]] = field(
        default=None, compare=False, repr=False
    )


@dataclass(frozen=True)
class AuxiliarySurfaceRequest:
    """Content tries to open a new window or tab."""

    target: str
    reply: Optional[Callable[["NavigationDecision"], None]] = field(
        default=None, compare=False, repr=False
    )


@dataclass(frozen=True)
class SurfaceClosed:
    """The OS closed the surface."""


@dataclass(frozen=True)
class Activate:
    """The application was activated (e.g. dock icon clicked on macOS)."""


@dataclass(frozen=True)
class QuitRequested:
    """Something asked the process to terminate."""

    source: str


@dataclass(frozen=True)
class CapabilityInvoked:
    """Content invoked a capability through the bridge."""

    request: "CapabilityRequest"
    reply: Optional[Callable[["CapabilityResponse"], None]] = field(
        default=None, compare=False, repr=False
    )


@dataclass(frozen=True)
class ContentProcessGone:
    """The content (renderer) process terminated.

    Attributes:
        status: Termination status reported by the engine (normal, abnormal, crashed, killed)
        exit_code: Process exit code
        pid: Renderer process id when known
    """

    status: str
    exit_code: int
    pid: Optional[int] = None


Event = Union[
    AppReady,
    ContentReady,
    LocationCommitted,
    NavigationAttempt,
    AuxiliarySurfaceRequest,
    SurfaceClosed,
    Activate,
    QuitRequested,
    CapabilityInvoked,
    ContentProcessGone,
]

FaultHandler = Callable[[BaseException, str], None]


class EventDispatcher:
    """FIFO, run-to-completion event dispatcher.

    Handlers are looked up by exact event type. An exception escaping a
    handler is passed to the fault handler and dispatch continues with the
    next queued event.

    Example:
        >>> dispatcher = EventDispatcher(fault_handler=lambda exc, ctx: None)
        >>> dispatcher.register(QuitRequested, lambda event: print(event.source))
        >>> dispatcher.post(QuitRequested(source="test"))
        test
    """

    def __init__(self, fault_handler: FaultHandler) -> None:
        self._fault_handler = fault_handler
        self._handlers: dict[type, Callable[[Any], None]] = {}
        self._queue: deque[Event] = deque()
        self._dispatching = False
        self._dispatched_count = 0

    def register(self, event_type: type, handler: Callable[[Any], None]) -> None:
        """Register the handler for one event type, replacing any previous one."""
        self._handlers[event_type] = handler

    @property
    def is_dispatching(self) -> bool:
        return self._dispatching

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def dispatched_count(self) -> int:
        return self._dispatched_count

    def post(self, event: Event) -> None:
        """Queue an event and, unless a dispatch is already running, drain the queue.

        When called from inside a handler the event is only queued; it runs
        after the current handler returns.
        """
        self._queue.append(event)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._queue:
                self._dispatch_one(self._queue.popleft())
        finally:
            self._dispatching = False

    def _dispatch_one(self, event: Event) -> None:
        handler = self._handlers.get(type(event))
        self._dispatched_count += 1

        if handler is None:
            logger.debug(f"No handler registered for {type(event).__name__}")
            return

        try:
            handler(event)
        except Exception as e:
            self._fault_handler(e, f"while handling {type(event).__name__}")
