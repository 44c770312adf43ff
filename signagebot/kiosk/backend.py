"""Interface between the kiosk core and a concrete rendering toolkit."""

from typing import Protocol

from .display import Geometry
from .effects import CreateSurface, InstallBridge


class SurfaceBackend(Protocol):
    """Operations the controller needs from a rendering toolkit.

    Implementations own the toolkit objects (window, web view, channel) and
    translate toolkit signals into kiosk events posted to the controller.
    They never decide policy themselves.
    """

    def primary_work_area(self) -> Geometry:
        """Usable size of the primary screen (excluding panels/docks)."""
        ...

    def create_surface(self, spec: CreateSurface) -> None: ...

    def install_bridge(self, spec: InstallBridge) -> None: ...

    def load_content(self, url: str) -> None: ...

    def show(self) -> None: ...

    def focus(self) -> None: ...

    def open_diagnostics(self) -> None: ...

    def set_fullscreen(self, active: bool) -> None: ...

    def release_surface(self) -> None: ...

    def terminate(self, exit_code: int) -> None: ...
