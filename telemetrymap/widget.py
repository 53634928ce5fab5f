from __future__ import annotations

import logging
import os
import threading
from http.server import ThreadingHTTPServer, SimpleHTTPRequestHandler
from pathlib import Path
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, Slot, QUrl, Signal
from PySide6.QtWidgets import QWidget, QVBoxLayout
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWebEngineCore import QWebEnginePage
from PySide6.QtWebChannel import QWebChannel

from .bridge import PageEvents, PageSurface
from .config import ConfigStore
from .dataset import Dataset
from .engine import LayerEngine
from .exceptions import SurfaceError
from .layers import BASE_TILE_URL
from .mode_control import ModeControl
from .models import DisplayConfig

logger = logging.getLogger(__name__)

# WSL2/QWebEngine stability knobs (safe to set if not already set)
os.environ.setdefault("QTWEBENGINE_DISABLE_SANDBOX", "1")
os.environ.setdefault(
    "QTWEBENGINE_CHROMIUM_FLAGS", "--no-sandbox --disable-gpu --disable-gpu-compositing"
)
os.environ.setdefault("LIBGL_ALWAYS_SOFTWARE", "1")
os.environ.setdefault("QT_OPENGL", "software")


class _DebugPage(QWebEnginePage):
    def javaScriptConsoleMessage(self, level, message, lineNumber, sourceID):
        logger.debug("[JS] %s:%s %s", sourceID, lineNumber, message)


class _Bridge(QObject):
    eventReceived = Signal(str)  # JSON

    @Slot(str)
    def log(self, msg: str):
        logger.debug("JS: %s", msg)

    @Slot(str)
    def emitEvent(self, payload_json: str):
        self.eventReceived.emit(payload_json)


class _StaticServer:
    def __init__(self, root_dir: Path, host: str = "127.0.0.1", port: int = 8000):
        self.root_dir = root_dir
        self.host = host
        self.port = port
        self._httpd: Optional[ThreadingHTTPServer] = None

    def start(self) -> None:
        root_dir = self.root_dir

        class Handler(SimpleHTTPRequestHandler):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, directory=str(root_dir), **kwargs)

            def log_message(self, format, *args):
                logger.debug("static server: " + format, *args)

        self._httpd = ThreadingHTTPServer((self.host, self.port), Handler)
        # port=0 picks a free port
        self.port = self._httpd.server_address[1]
        t = threading.Thread(target=self._httpd.serve_forever, daemon=True)
        t.start()

    def shutdown(self) -> None:
        if self._httpd:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class TelemetryMapWidget(QWidget):
    """
    QWebEngine + OpenLayers telemetry map.

    Hosts the layer engine: mounts on construction, reconciles on every
    configuration or dataset change, unmounts on close. Layer commands go to
    the page through a ``PageSurface``; page events come back through
    ``PageEvents``.

    Signals:
        configChanged(DisplayConfig): the configuration changed (including
            changes made with the in-map mode control).
    """

    configChanged = Signal(object)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        *,
        config: Optional[DisplayConfig] = None,
        dataset: Optional[Dataset] = None,
        store: Optional[ConfigStore] = None,
        base_tile_url: str = BASE_TILE_URL,
        port: int = 0,
    ):
        super().__init__(parent)

        pkg_root = Path(__file__).resolve().parent
        self._static_root = pkg_root  # serves /resources
        self._server = _StaticServer(self._static_root, port=port)
        self._server.start()

        self._view = QWebEngineView(self)
        self._page = _DebugPage(self._view)
        self._view.setPage(self._page)

        self._bridge = _Bridge()

        # IMPORTANT: keep channel reference
        self._channel = QWebChannel()
        self._channel.registerObject("bridge", self._bridge)
        self._page.setWebChannel(self._channel)

        self._surface = PageSurface(self._page.runJavaScript)
        self._events = PageEvents()
        self._bridge.eventReceived.connect(self._events.dispatch)
        self._page.loadFinished.connect(self._surface.page_loaded)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._view)

        # load map template
        url = f"{self._server.base_url}/resources/map.html"
        self._view.load(QUrl(url))

        self._store = store if store is not None else ConfigStore(config)
        self._dataset = dataset if dataset is not None else Dataset.empty()
        self._mode_control = ModeControl(
            lambda: self._store.config, self._store.on_config_change
        )
        self._events.on("mode.select", lambda ev: self.select_mode(str(ev.get("value", ""))))

        self._engine = LayerEngine(self._surface, base_tile_url=base_tile_url)
        self._engine.mount(self._store.config, self._dataset)
        self._unsubscribe = self._store.subscribe(self._on_config)

    def closeEvent(self, event) -> None:
        try:
            self._unsubscribe()
            self._engine.unmount()
            self._server.shutdown()
        finally:
            super().closeEvent(event)

    # ---------- public API ----------
    @property
    def engine(self) -> LayerEngine:
        return self._engine

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def config(self) -> DisplayConfig:
        return self._store.config

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    def set_config(self, config: DisplayConfig) -> None:
        self._store.on_config_change(config)

    def update_config(self, **changes: Any) -> DisplayConfig:
        return self._store.update(**changes)

    def set_dataset(self, dataset: Dataset) -> None:
        """Replace the whole batch of samples and reconcile."""
        self._dataset = dataset
        self._engine.update(self._store.config, dataset)

    def set_records(self, records: list[dict[str, Any]], **kwargs: Any) -> Dataset:
        """Convenience: build a Dataset from JSON-like records and show it."""
        ds = Dataset.from_records(records, **kwargs)
        self.set_dataset(ds)
        return ds

    def select_mode(self, value: str) -> None:
        """Same as picking ``value`` in the in-map select box."""
        self._mode_control.select(value)

    def on_error(self, callback: Callable[[SurfaceError], None]) -> None:
        """Register for engine-side and page-side rendering failures."""
        self._engine.on_error(callback)
        self._events.on_error(callback)

    # ---------- event handling ----------
    def _on_config(self, config: DisplayConfig) -> None:
        self._engine.update(config, self._dataset)
        self.configChanged.emit(config)
