"""Page-side half of the map: JSON commands out, JSON events in.

Nothing here imports Qt. The widget plugs a ``runJavaScript`` callable into
``PageSurface`` and feeds bridge payloads to ``PageEvents.dispatch``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from .exceptions import SurfaceError
from .layers import LayerSpec
from .models import XY, HeatmapStyle, LonLat
from .projection import web_mercator

logger = logging.getLogger(__name__)

Command = Dict[str, Any]
Event = Dict[str, Any]


class PageSurface:
    """
    Rendering surface that speaks the ``window.__ol_bridge.apply(cmd)`` protocol.

    Commands sent before the page has loaded are queued and flushed, in
    order, by ``page_loaded(True)``.
    """

    def __init__(self, run_js: Callable[[str], None]):
        self._run_js = run_js
        self._ready = False
        self._queue: List[Command] = []

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def pending(self) -> List[Command]:
        return list(self._queue)

    def page_loaded(self, ok: bool) -> None:
        self._ready = bool(ok)
        if not self._ready:
            logger.error("map page failed to load; %d commands held", len(self._queue))
            return
        # flush queued commands
        queued, self._queue = self._queue, []
        for cmd in queued:
            self.send(cmd)

    def send(self, cmd: Command) -> None:
        if not self._ready:
            self._queue.append(cmd)
            return
        self._run_js(f"window.__ol_bridge.apply({json.dumps(cmd)});")

    # ---------- rendering surface ----------
    def add_layer(self, spec: LayerSpec) -> None:
        cmd: Command = {"type": "layer.add"}
        cmd.update(spec.to_js())
        self.send(cmd)

    def remove_layer(self, spec: LayerSpec) -> None:
        self.send({"type": "layer.remove", "layer_id": spec.handle, "kind": spec.kind})

    def update_heatmap(self, handle: str, style: HeatmapStyle) -> None:
        self.send({"type": "heatmap.set_style", "layer_id": handle, "style": style.to_js()})

    def set_view_zoom(self, zoom: float) -> None:
        self.send({"type": "view.set_zoom", "zoom": float(zoom)})

    def set_view_center(self, lonlat: LonLat) -> None:
        x, y = self.project(lonlat)
        self.send({"type": "view.set_center", "center": [x, y]})

    def project(self, lonlat: LonLat) -> XY:
        return web_mercator(lonlat)


class PageEvents:
    """
    Routes events posted by the page to handlers registered per event type.

    ``error`` events are turned into ``SurfaceError`` and passed to the
    ``on_error`` handlers. Tile load failures are reported once per layer.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Callable[[Event], None]]] = {}
        self._error_handlers: List[Callable[[SurfaceError], None]] = []
        self._failed_tile_layers: Set[str] = set()
        self.on("error", self._on_error_event)

    def on(self, event_type: str, callback: Callable[[Event], None]) -> None:
        self._handlers.setdefault(event_type, []).append(callback)

    def on_error(self, callback: Callable[[SurfaceError], None]) -> None:
        self._error_handlers.append(callback)

    def dispatch(self, payload_json: str) -> None:
        try:
            ev = json.loads(payload_json)
        except ValueError:
            logger.warning("dropping malformed event from page: %r", payload_json)
            return
        if not isinstance(ev, dict):
            logger.warning("dropping non-object event from page: %r", payload_json)
            return
        for cb in list(self._handlers.get(str(ev.get("type", "")), ())):
            cb(ev)

    def _on_error_event(self, ev: Event) -> None:
        err = self.surface_error(ev)
        if err is None:
            return
        logger.error("map page error (%s %s): %s", err.operation, err.handle, err)
        for cb in list(self._error_handlers):
            try:
                cb(err)
            except Exception:
                logger.exception("error callback %r failed", cb)

    def surface_error(self, ev: Event) -> Optional[SurfaceError]:
        """The ``SurfaceError`` for an error event, or None if already reported."""
        operation = str(ev.get("operation", ""))
        handle = str(ev.get("layer_id", ""))
        if operation == "tile":
            if handle in self._failed_tile_layers:
                return None
            self._failed_tile_layers.add(handle)
        return SurfaceError(
            str(ev.get("message", "unknown error")), operation=operation, handle=handle
        )
