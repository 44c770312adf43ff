"""
Qt WebEngine backend for the signage surface.

Translates Qt signals into kiosk events and applies the controller's effects
to a single frameless ``QMainWindow`` hosting a ``QWebEngineView``. No policy
lives here: navigation verdicts, capability results and quit decisions all
come back from :class:`~signagebot.kiosk.controller.SessionController`.

PyQt6 and PyQt6-WebEngine are only imported by this module, so the rest of
the kiosk package works without a display.
"""

import json
import logging
import signal
from pathlib import Path
from typing import Any, Optional

from PyQt6.QtCore import QFile, QIODevice, QObject, Qt, QTimer, QUrl, pyqtSlot
from PyQt6.QtGui import QCloseEvent, QColor
from PyQt6.QtWebChannel import QWebChannel
from PyQt6.QtWebEngineCore import (
    QWebEngineFullScreenRequest,
    QWebEngineNewWindowRequest,
    QWebEnginePage,
    QWebEngineScript,
    QWebEngineSettings,
)
from PyQt6.QtWebEngineWidgets import QWebEngineView
from PyQt6.QtWidgets import QApplication, QMainWindow

from .bridge import CapabilityRequest, CapabilityResponse, ErrorCode
from .controller import SessionController
from .display import Geometry
from .effects import CreateSurface, InstallBridge
from .events import (
    Activate,
    ContentProcessGone,
    ContentReady,
    LocationCommitted,
    QuitRequested,
    SurfaceClosed,
)
from .exceptions import SurfaceBackendError
from .session import SessionContext

logger = logging.getLogger(__name__)

BRIDGE_OBJECT_NAME = "signage"
QWEBCHANNEL_RESOURCE = ":/qtwebchannel/qwebchannel.js"
BRIDGE_SCRIPT_PATH = Path(__file__).parent / "static" / "bridge.js"

# Used when Qt reports no primary screen (headless boot, display not yet up)
FALLBACK_WORK_AREA = Geometry(1920, 1080)

# Interval at which the Qt loop hands control back to Python so signal
# handlers can run
SIGNAL_POLL_INTERVAL_MS = 250

_TERMINATION_STATUS_NAMES = {
    QWebEnginePage.RenderProcessTerminationStatus.NormalTerminationStatus: "normal",
    QWebEnginePage.RenderProcessTerminationStatus.AbnormalTerminationStatus: "abnormal",
    QWebEnginePage.RenderProcessTerminationStatus.CrashedTerminationStatus: "crashed",
    QWebEnginePage.RenderProcessTerminationStatus.KilledTerminationStatus: "killed",
}


class CapabilityChannel(QObject):
    """Object published to content over ``QWebChannel``.

    Exposes a single slot; the operation name is validated by the bridge,
    not here.
    """

    def __init__(self, controller: SessionController, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._controller = controller

    @pyqtSlot(str, "QVariantList", result="QVariantMap")
    def invoke(self, operation: str, arguments: list[Any]) -> dict[str, Any]:
        request = CapabilityRequest(operation=operation, arguments=tuple(arguments or ()))
        response = self._controller.invoke_capability(request)
        if response is None:
            response = CapabilityResponse(
                operation=operation,
                ok=False,
                error_code=ErrorCode.OPERATION_FAILED,
                error_message="Host busy, request was not run",
            )
        return response.to_payload()


class KioskPage(QWebEnginePage):
    """Web page that asks the controller before every main-frame navigation."""

    def __init__(self, controller: SessionController, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._controller = controller

        self.newWindowRequested.connect(self._on_new_window_requested)
        self.fullScreenRequested.connect(self._on_full_screen_requested)
        self.loadFinished.connect(self._on_load_finished)
        self.urlChanged.connect(self._on_url_changed)
        self.renderProcessTerminated.connect(self._on_render_process_terminated)

    def acceptNavigationRequest(
        self, url: QUrl, nav_type: QWebEnginePage.NavigationType, is_main_frame: bool
    ) -> bool:
        if not is_main_frame:
            return True
        return self._controller.decide_navigation(url.toString()).allowed

    def createWindow(self, window_type: QWebEnginePage.WebWindowType) -> None:
        return None

    def _on_new_window_requested(self, request: QWebEngineNewWindowRequest) -> None:
        # Leaving the request unhandled makes the engine drop the load
        self._controller.decide_auxiliary_surface(request.requestedUrl().toString())

    def _on_full_screen_requested(self, request: QWebEngineFullScreenRequest) -> None:
        request.accept()

    def _on_load_finished(self, ok: bool) -> None:
        if ok:
            self._controller.post(ContentReady())
        else:
            logger.error(f"Content failed to load: {self.url().toString()}")

    def _on_url_changed(self, url: QUrl) -> None:
        self._controller.post(LocationCommitted(url=url.toString()))

    def _on_render_process_terminated(
        self, status: QWebEnginePage.RenderProcessTerminationStatus, exit_code: int
    ) -> None:
        pid = self.renderProcessPid() or None
        self._controller.post(
            ContentProcessGone(
                status=_TERMINATION_STATUS_NAMES.get(status, str(status)),
                exit_code=exit_code,
                pid=pid,
            )
        )


class KioskWindow(QMainWindow):
    """Top-level window; reports OS-initiated closes to the controller."""

    def __init__(self, controller: SessionController) -> None:
        super().__init__()
        self._controller = controller

    def closeEvent(self, event: QCloseEvent) -> None:
        event.accept()
        self._controller.post(SurfaceClosed())


class QtSurfaceBackend:
    """``SurfaceBackend`` implementation on top of Qt WebEngine."""

    def __init__(self, app: QApplication) -> None:
        self.app = app
        self._controller: Optional[SessionController] = None
        self._window: Optional[KioskWindow] = None
        self._view: Optional[QWebEngineView] = None
        self._page: Optional[KioskPage] = None
        self._channel: Optional[QWebChannel] = None
        self._devtools: Optional[QWebEngineView] = None
        self._fullscreen = True
        self.exit_code = 0

    def bind(self, controller: SessionController) -> None:
        """Attach the controller that receives this backend's events."""
        self._controller = controller

    @property
    def controller(self) -> SessionController:
        if self._controller is None:
            raise SurfaceBackendError("Backend used before a controller was bound")
        return self._controller

    def _require_page(self) -> KioskPage:
        if self._page is None:
            raise SurfaceBackendError("No surface exists", "NO_SURFACE")
        return self._page

    def _require_window(self) -> KioskWindow:
        if self._window is None:
            raise SurfaceBackendError("No surface exists", "NO_SURFACE")
        return self._window

    # SurfaceBackend

    def primary_work_area(self) -> Geometry:
        screen = self.app.primaryScreen()
        if screen is None:
            logger.warning(
                f"No primary screen reported, using {FALLBACK_WORK_AREA.width}x"
                f"{FALLBACK_WORK_AREA.height}"
            )
            return FALLBACK_WORK_AREA
        area = screen.availableGeometry()
        return Geometry(area.width(), area.height())

    def create_surface(self, spec: CreateSurface) -> None:
        window = KioskWindow(self.controller)
        window.setWindowTitle(self.controller.context.settings.app_name)
        window.resize(spec.width, spec.height)
        window.setWindowFlag(Qt.WindowType.FramelessWindowHint, not spec.framed)
        if spec.kiosk:
            window.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, True)
        window.setStyleSheet(f"background-color: {spec.background_color};")

        page = KioskPage(self.controller, window)
        page.setBackgroundColor(QColor(spec.background_color))

        settings = page.settings()
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessRemoteUrls, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessFileUrls, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.AllowRunningInsecureContent, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.FullScreenSupportEnabled, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.JavascriptCanOpenWindows, False)

        view = QWebEngineView(window)
        view.setPage(page)
        if not self.controller.context.config.dev_mode:
            view.setContextMenuPolicy(Qt.ContextMenuPolicy.NoContextMenu)
        window.setCentralWidget(view)

        self._window = window
        self._view = view
        self._page = page
        self._fullscreen = spec.fullscreen

    def install_bridge(self, spec: InstallBridge) -> None:
        page = self._require_page()

        channel = QWebChannel(page)
        channel.registerObject(BRIDGE_OBJECT_NAME, CapabilityChannel(self.controller, channel))
        page.setWebChannel(channel)

        script = QWebEngineScript()
        script.setName("signage-bridge")
        script.setInjectionPoint(QWebEngineScript.InjectionPoint.DocumentCreation)
        script.setWorldId(QWebEngineScript.ScriptWorldId.MainWorld)
        script.setRunsOnSubFrames(False)
        script.setSourceCode(build_bridge_source(spec.dev_mode, spec.host_version))
        page.scripts().insert(script)

        self._channel = channel
        logger.debug(f"Capability channel installed as window.{BRIDGE_OBJECT_NAME}")

    def load_content(self, url: str) -> None:
        logger.info(f"Loading content: {url}")
        self._require_page().load(QUrl(url))

    def show(self) -> None:
        window = self._require_window()
        if self._fullscreen:
            window.showFullScreen()
        else:
            window.show()

    def focus(self) -> None:
        window = self._require_window()
        window.raise_()
        window.activateWindow()
        if self._view is not None:
            self._view.setFocus()

    def open_diagnostics(self) -> None:
        page = self._require_page()
        if self._devtools is None:
            self._devtools = QWebEngineView()
            self._devtools.setWindowTitle("SignageBot DevTools")
            self._devtools.resize(1024, 768)
        page.setDevToolsPage(self._devtools.page())
        self._devtools.show()

    def set_fullscreen(self, active: bool) -> None:
        self._fullscreen = active
        window = self._require_window()
        if not window.isVisible():
            return
        if active:
            window.showFullScreen()
        else:
            window.showNormal()

    def release_surface(self) -> None:
        if self._devtools is not None:
            self._devtools.close()
            self._devtools.deleteLater()
            self._devtools = None
        if self._window is not None:
            self._window.deleteLater()
        self._window = None
        self._view = None
        self._page = None
        self._channel = None

    def terminate(self, exit_code: int) -> None:
        self.exit_code = exit_code
        self.app.exit(exit_code)


def _read_qwebchannel_js() -> str:
    resource = QFile(QWEBCHANNEL_RESOURCE)
    if not resource.open(QIODevice.OpenModeFlag.ReadOnly):
        raise SurfaceBackendError(
            f"Cannot open {QWEBCHANNEL_RESOURCE}, is QtWebChannel installed?", "MISSING_RESOURCE"
        )
    try:
        return bytes(resource.readAll().data()).decode("utf-8")
    finally:
        resource.close()


def build_bridge_source(dev_mode: bool, host_version: str) -> str:
    """Concatenate qwebchannel.js, the session flags and the content shim."""
    shim = BRIDGE_SCRIPT_PATH.read_text(encoding="utf-8")
    flags = (
        f"window.__SIGNAGE_DEV_MODE__ = {json.dumps(dev_mode)};\n"
        f"window.__SIGNAGE_HOST_VERSION__ = {json.dumps(host_version)};\n"
    )
    return "\n".join([_read_qwebchannel_js(), flags, shim])


def _install_signal_handlers(app: QApplication, controller: SessionController) -> QTimer:
    """Route SIGINT/SIGTERM into the quit path.

    Python only runs signal handlers between bytecodes, so a timer keeps the
    interpreter ticking while Qt's loop is blocked in C++.
    """

    def _on_signal(signum: int, frame: Any) -> None:
        name = signal.Signals(signum).name
        logger.info(f"Received {name}")
        QTimer.singleShot(0, lambda: controller.post(QuitRequested(source=f"signal {name}")))

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    ticker = QTimer(app)
    ticker.timeout.connect(lambda: None)
    ticker.start(SIGNAL_POLL_INTERVAL_MS)
    return ticker


def run_kiosk(context: SessionContext, argv: Optional[list[str]] = None) -> int:
    """Run one kiosk session on the Qt event loop.

    Platform tuning must already be applied to the environment: Chromium
    reads its switches when the ``QApplication`` is constructed.

    Args:
        context: Session context for this run
        argv: Arguments handed to Qt

    Returns:
        Process exit code
    """
    app = QApplication(argv or [context.settings.app_name])
    app.setApplicationName(context.settings.app_name)
    app.setApplicationVersion(context.platform.app_version)
    app.setQuitOnLastWindowClosed(False)

    backend = QtSurfaceBackend(app)
    controller = SessionController(context, backend)
    backend.bind(controller)

    controller.lifecycle.install_fault_handlers()
    ticker = _install_signal_handlers(app, controller)

    def _on_state_changed(state: Qt.ApplicationState) -> None:
        if state == Qt.ApplicationState.ApplicationActive:
            controller.post(Activate())

    app.applicationStateChanged.connect(_on_state_changed)

    QTimer.singleShot(0, controller.start)
    try:
        exit_code = app.exec()
    finally:
        ticker.stop()
        controller.lifecycle.uninstall_fault_handlers()

    status = controller.get_status()
    logger.info(
        f"Kiosk session ended with code {exit_code} (uptime: {status.uptime}, "
        f"faults: {status.fault_count}, suppressed quits: {status.suppressed_quits}, "
        f"denied navigations: {status.denied_navigations})"
    )
    return exit_code
