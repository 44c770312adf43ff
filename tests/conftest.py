"""Shared fixtures: settings in a temp directory, session contexts and a recording backend."""

from pathlib import Path
from typing import Any, Callable

import pytest

from signagebot.config.settings import SignageSettings
from signagebot.kiosk.controller import SessionController
from signagebot.kiosk.display import Geometry
from signagebot.kiosk.effects import CreateSurface, InstallBridge
from signagebot.kiosk.platform import PlatformInfo
from signagebot.kiosk.session import SessionConfig, SessionContext


class FakeSurface:
    """SurfaceBackend that records every call instead of drawing.

    ``calls`` holds ``(method, argument)`` tuples in the order the controller
    applied them.
    """

    def __init__(self, work_area: Geometry = Geometry(1920, 1080)) -> None:
        self.work_area = work_area
        self.calls: list[tuple[str, Any]] = []
        self.loaded_url: Any = None
        self.visible = False
        self.fullscreen: Any = None
        self.terminated_with: Any = None

    def primary_work_area(self) -> Geometry:
        return self.work_area

    def create_surface(self, spec: CreateSurface) -> None:
        self.calls.append(("create_surface", spec))
        self.fullscreen = spec.fullscreen
        self.visible = False

    def install_bridge(self, spec: InstallBridge) -> None:
        self.calls.append(("install_bridge", spec))

    def load_content(self, url: str) -> None:
        self.calls.append(("load_content", url))
        self.loaded_url = url

    def show(self) -> None:
        self.calls.append(("show", None))
        self.visible = True

    def focus(self) -> None:
        self.calls.append(("focus", None))

    def open_diagnostics(self) -> None:
        self.calls.append(("open_diagnostics", None))

    def set_fullscreen(self, active: bool) -> None:
        self.calls.append(("set_fullscreen", active))
        self.fullscreen = active

    def release_surface(self) -> None:
        self.calls.append(("release_surface", None))
        self.visible = False

    def terminate(self, exit_code: int) -> None:
        self.calls.append(("terminate", exit_code))
        self.terminated_with = exit_code

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Directory holding a minimal signage document."""
    directory = tmp_path / "content"
    directory.mkdir()
    (directory / "index.html").write_text("<html><body>signage</body></html>", encoding="utf-8")
    (directory / "next.html").write_text("<html><body>next</body></html>", encoding="utf-8")
    return directory


@pytest.fixture
def test_settings(tmp_path: Path, content_dir: Path) -> SignageSettings:
    """Settings isolated in a temp directory, with file logging off."""
    settings = SignageSettings(
        content_path=content_dir / "index.html",
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
    )
    settings.logging.file_enabled = False
    return settings


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo(platform="linux", architecture="arm64", app_version="1.0.0")


@pytest.fixture
def darwin_platform() -> PlatformInfo:
    return PlatformInfo(platform="darwin", architecture="x64", app_version="1.0.0")


@pytest.fixture
def make_context(
    test_settings: SignageSettings, darwin_platform: PlatformInfo
) -> Callable[..., SessionContext]:
    """Factory for session contexts; keyword arguments become SessionConfig fields."""

    def _make(platform: PlatformInfo = darwin_platform, **config: Any) -> SessionContext:
        return SessionContext(
            config=SessionConfig(**config), platform=platform, settings=test_settings
        )

    return _make


@pytest.fixture
def context(make_context: Callable[..., SessionContext]) -> SessionContext:
    """Production-like session: kiosk, quit suppressed."""
    return make_context(kiosk_mode=True)


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def make_controller(
    make_context: Callable[..., SessionContext], fake_surface: FakeSurface
) -> Callable[..., SessionController]:
    """Factory for controllers wired to the shared FakeSurface."""

    def _make(platform: Any = None, **config: Any) -> SessionController:
        if platform is None:
            session_context = make_context(**config)
        else:
            session_context = make_context(platform=platform, **config)
        return SessionController(session_context, fake_surface)

    return _make
