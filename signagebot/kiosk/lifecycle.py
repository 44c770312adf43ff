"""
Process lifecycle policy for unattended signage.

Nobody is standing next to a signage board to restart it, so:

* uncaught faults are logged with full detail and the process keeps running;
* quit requests are suppressed unless developer mode or ``--allow-quit`` is set;
* termination of the content (renderer) process is logged and handed to a
  recovery hook, which does nothing by default.

State machine::

    RUNNING --fault--> RUNNING
    RUNNING --quit (blocked)--> RUNNING
    RUNNING --quit (allowed)--> TERMINATED
"""

import logging
import sys
import threading
from enum import Enum
from types import TracebackType
from typing import Any, Optional, Protocol

import psutil

from ..utils.logging import get_logger
from .effects import Effect, TerminateProcess
from .events import ContentProcessGone
from .session import SessionContext

logger = logging.getLogger(__name__)

QUIT_PREVENTED_MESSAGE = "Quit prevented - use --allow-quit flag if needed"


class LifecycleState(Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class RecoveryHook(Protocol):
    """Extension point invoked after the content process terminated."""

    def __call__(self, event: ContentProcessGone, context: SessionContext) -> list[Effect]: ...


class NoRecovery:
    """Default recovery hook: observe only, never restart."""

    def __call__(self, event: ContentProcessGone, context: SessionContext) -> list[Effect]:
        return []


def _memory_snapshot() -> dict[str, int]:
    """Host memory figures in MB for crash diagnostics; empty if unavailable."""
    try:
        process = psutil.Process()
        return {
            "host_rss_mb": int(process.memory_info().rss / 1024 / 1024),
            "system_available_mb": int(psutil.virtual_memory().available / 1024 / 1024),
        }
    except psutil.Error:
        logger.debug("Could not read memory usage", exc_info=True)
        return {}


class LifecyclePolicy:
    """Quit suppression, fault survival and content-process observation."""

    def __init__(self, context: SessionContext, recovery_hook: Optional[RecoveryHook] = None) -> None:
        self.context = context
        self.recovery_hook: RecoveryHook = recovery_hook or NoRecovery()
        self.logger = get_logger("kiosk.lifecycle")

        self._state = LifecycleState.RUNNING
        self._fault_count = 0
        self._last_fault: Optional[str] = None
        self._suppressed_quits = 0
        self._content_process_exits = 0

        self._previous_excepthook: Optional[Any] = None
        self._previous_threading_excepthook: Optional[Any] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def fault_count(self) -> int:
        return self._fault_count

    @property
    def last_fault(self) -> Optional[str]:
        return self._last_fault

    @property
    def suppressed_quits(self) -> int:
        return self._suppressed_quits

    @property
    def content_process_exits(self) -> int:
        return self._content_process_exits

    # Faults

    def handle_fault(self, error: BaseException, context: str = "") -> None:
        """Log a host fault with its traceback and carry on.

        Never raises; this is the last-resort barrier for the whole process.
        """
        self._fault_count += 1
        self._last_fault = f"{type(error).__name__}: {error}"
        where = f" {context}" if context else ""
        self.logger.error(
            f"Uncaught exception{where} (fault #{self._fault_count}), continuing",
            exc_info=(type(error), error, error.__traceback__),
        )

    def _excepthook(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        if not issubclass(exc_type, Exception) and self._previous_excepthook is not None:
            self._previous_excepthook(exc_type, exc_value, exc_traceback)
            return
        self.handle_fault(exc_value.with_traceback(exc_traceback), "in host process")

    def _threading_excepthook(self, args: "threading.ExceptHookArgs") -> None:
        if args.exc_value is None:
            return
        thread_name = args.thread.name if args.thread is not None else "unknown"
        self.handle_fault(args.exc_value, f"in thread {thread_name}")

    def install_fault_handlers(self) -> None:
        """Route uncaught exceptions from any thread into :meth:`handle_fault`.

        PyQt6 aborts the process when a slot raises unless ``sys.excepthook``
        has been replaced, so this must run before the event loop starts.
        """
        if self._previous_excepthook is not None:
            return
        self._previous_excepthook = sys.excepthook
        self._previous_threading_excepthook = threading.excepthook
        sys.excepthook = self._excepthook
        threading.excepthook = self._threading_excepthook
        self.logger.debug("Fault handlers installed")

    def uninstall_fault_handlers(self) -> None:
        """Restore the hooks that were active before :meth:`install_fault_handlers`."""
        if self._previous_excepthook is None:
            return
        sys.excepthook = self._previous_excepthook
        threading.excepthook = self._previous_threading_excepthook
        self._previous_excepthook = None
        self._previous_threading_excepthook = None

    # Quit

    def request_quit(self, source: str) -> list[Effect]:
        """Handle a termination request.

        Args:
            source: What asked to quit (capability, signal, last surface closed, ...)

        Returns:
            ``[TerminateProcess()]`` when termination is allowed, else no effects
        """
        if self._state is LifecycleState.TERMINATED:
            return []

        if not self.context.config.quit_allowed:
            self._suppressed_quits += 1
            self.logger.info(QUIT_PREVENTED_MESSAGE)
            return []

        self.logger.info(f"Quit requested by {source}, terminating")
        self._state = LifecycleState.TERMINATED
        return [TerminateProcess(exit_code=0)]

    # Content process

    def on_content_process_gone(self, event: ContentProcessGone) -> list[Effect]:
        """Log a renderer termination and hand it to the recovery hook."""
        self._content_process_exits += 1
        details = {
            "status": event.status,
            "exit_code": event.exit_code,
            "pid": event.pid,
            **_memory_snapshot(),
        }
        self.logger.warning(f"Content process gone, details: {details}")
        return list(self.recovery_hook(event, self.context))
