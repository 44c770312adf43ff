"""
Capability bridge between displayed content and the host.

Content can reach exactly three host operations, enumerated in
``CapabilityOperation``. Requests name an operation; the bridge looks it up in
a fixed dispatch table. Names outside the enum, unexpected arguments and
failing operations all produce a failed response for that request only.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..utils.logging import VERBOSE, get_logger
from .display import DisplayManager
from .effects import Effect
from .exceptions import CapabilityError
from .lifecycle import LifecyclePolicy
from .session import SessionContext

logger = logging.getLogger(__name__)


class CapabilityOperation(Enum):
    """The closed set of host operations content may invoke (wire names as values)."""

    GET_PLATFORM_INFO = "getPlatformInfo"
    TOGGLE_FULLSCREEN = "toggleFullscreen"
    REQUEST_QUIT = "requestQuit"


class ErrorCode:
    UNKNOWN_OPERATION = "UNKNOWN_OPERATION"
    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    OPERATION_FAILED = "OPERATION_FAILED"


@dataclass(frozen=True)
class CapabilityRequest:
    """One invocation from content.

    Attributes:
        operation: Wire name of the operation
        arguments: Positional arguments sent by content (every operation takes none)
    """

    operation: str
    arguments: tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CapabilityResponse:
    """Outcome of one invocation, either a result or a typed failure."""

    operation: str
    ok: bool
    result: Any = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """Serialise for the content side of the channel."""
        if self.ok:
            return {"ok": True, "operation": self.operation, "result": self.result}
        return {
            "ok": False,
            "operation": self.operation,
            "error": {"code": self.error_code, "message": self.error_message},
        }


OperationHandler = Callable[[], tuple[Any, list[Effect]]]


class CapabilityBridge:
    """Host side of the capability channel.

    Example:
        >>> response, effects = bridge.invoke(CapabilityRequest("getPlatformInfo"))
        >>> response.result["isKiosk"]
        True
    """

    def __init__(
        self, context: SessionContext, display: DisplayManager, lifecycle: LifecyclePolicy
    ) -> None:
        self.context = context
        self.display = display
        self.lifecycle = lifecycle
        self.logger = get_logger("kiosk.bridge")

        self._dispatch: dict[CapabilityOperation, OperationHandler] = {
            CapabilityOperation.GET_PLATFORM_INFO: self._get_platform_info,
            CapabilityOperation.TOGGLE_FULLSCREEN: self._toggle_fullscreen,
            CapabilityOperation.REQUEST_QUIT: self._request_quit,
        }
        self._invocation_count = 0

    @property
    def operations(self) -> list[str]:
        """Wire names exposed to content."""
        return [operation.value for operation in self._dispatch]

    @property
    def invocation_count(self) -> int:
        return self._invocation_count

    def invoke(self, request: CapabilityRequest) -> tuple[CapabilityResponse, list[Effect]]:
        """Run one capability request.

        Returns:
            Tuple of (response for content, effects for the host)
        """
        self._invocation_count += 1

        try:
            operation = self._resolve(request)
            result, effects = self._dispatch[operation]()
        except CapabilityError as e:
            self.logger.warning(f"Capability request {request.operation!r} rejected: {e.message}")
            return self._failure(request, e.error_code or ErrorCode.OPERATION_FAILED, e.message), []
        except Exception as e:
            self.logger.exception(f"Capability {request.operation!r} failed")
            return self._failure(request, ErrorCode.OPERATION_FAILED, str(e)), []

        self.logger.log(VERBOSE, f"Capability {operation.value} -> {result!r}")
        return CapabilityResponse(operation=operation.value, ok=True, result=result), effects

    def _resolve(self, request: CapabilityRequest) -> CapabilityOperation:
        try:
            operation = CapabilityOperation(request.operation)
        except ValueError:
            raise CapabilityError(
                f"Unknown operation: {request.operation!r}", ErrorCode.UNKNOWN_OPERATION
            ) from None

        if request.arguments:
            raise CapabilityError(
                f"{operation.value} takes no arguments", ErrorCode.INVALID_ARGUMENTS
            )
        return operation

    @staticmethod
    def _failure(request: CapabilityRequest, code: str, message: str) -> CapabilityResponse:
        return CapabilityResponse(
            operation=str(request.operation), ok=False, error_code=code, error_message=message
        )

    # Operations

    def _get_platform_info(self) -> tuple[dict[str, Any], list[Effect]]:
        platform_info = self.context.platform
        return (
            {
                "platform": platform_info.platform,
                "architecture": platform_info.architecture,
                "isKiosk": self.context.config.kiosk_mode,
                "appVersion": platform_info.app_version,
            },
            [],
        )

    def _toggle_fullscreen(self) -> tuple[bool, list[Effect]]:
        active, effects = self.display.toggle_fullscreen()
        return active, effects

    def _request_quit(self) -> tuple[None, list[Effect]]:
        return None, self.lifecycle.request_quit("content")
