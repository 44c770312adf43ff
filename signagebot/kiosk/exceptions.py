"""Exceptions raised by the kiosk session controller."""

from typing import Optional


class KioskError(Exception):
    """Base exception for kiosk session errors.

    Attributes:
        message: Error description
        component: Component where error occurred (optional)
        error_code: Error code for categorization (optional)
    """

    def __init__(
        self, message: str, component: Optional[str] = None, error_code: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.component = component
        self.error_code = error_code


class DisplayStateError(KioskError):
    """Raised when a surface transition is requested from an invalid lifecycle state."""

    def __init__(self, message: str, error_code: str = "INVALID_TRANSITION") -> None:
        super().__init__(message, "display", error_code)


class CapabilityError(KioskError):
    """Raised inside the capability bridge; converted into a failed response.

    The ``error_code`` is what content sees in the failure payload.
    """

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message, "bridge", error_code)


class SurfaceBackendError(KioskError):
    """Raised when the rendering backend cannot be created or driven."""

    def __init__(self, message: str, error_code: Optional[str] = None) -> None:
        super().__init__(message, "surface", error_code)
