"""Tests for the page command/event bridge in bridge.py.

PageSurface is driven with a fake ``runJavaScript`` that records the
scripts it is given, so the JSON commands can be decoded and checked.
"""

import json
import math

from telemetrymap.bridge import PageEvents, PageSurface
from telemetrymap.config import ConfigStore
from telemetrymap.dataset import Dataset
from telemetrymap.engine import LayerEngine
from telemetrymap.exceptions import SurfaceError
from telemetrymap.layers import HeatmapLayerSpec, TileLayerSpec
from telemetrymap.mode_control import ModeControl
from telemetrymap.models import DisplayConfig, HeatmapStyle, LayerRole, MapMode, PointSet
from telemetrymap.projection import web_mercator

PREFIX = "window.__ol_bridge.apply("
SUFFIX = ");"


class FakePage:
    """Collects scripts passed to runJavaScript."""

    def __init__(self):
        self.scripts = []

    def __call__(self, js):
        self.scripts.append(js)

    def commands(self):
        out = []
        for js in self.scripts:
            assert js.startswith(PREFIX) and js.endswith(SUFFIX)
            out.append(json.loads(js[len(PREFIX):-len(SUFFIX)]))
        return out


def loaded_surface():
    page = FakePage()
    surface = PageSurface(page)
    surface.page_loaded(True)
    return page, surface


class TestCommands:
    """Tests for the JSON commands PageSurface sends."""

    def test_add_tile_layer(self):
        page, surface = loaded_surface()
        surface.add_layer(TileLayerSpec("customTile-2", LayerRole.CUSTOM_TILE, url="http://t/{z}/{x}/{y}"))

        assert page.commands() == [
            {
                "type": "layer.add",
                "layer_id": "customTile-2",
                "role": "customTile",
                "kind": "tile",
                "z_index": 1,
                "url": "http://t/{z}/{x}/{y}",
            }
        ]

    def test_remove_layer(self):
        page, surface = loaded_surface()
        spec = HeatmapLayerSpec("heatmap-4", LayerRole.HEATMAP, points=PointSet(), style=HeatmapStyle())
        surface.remove_layer(spec)

        assert page.commands() == [{"type": "layer.remove", "layer_id": "heatmap-4", "kind": "heatmap"}]

    def test_heatmap_style(self):
        page, surface = loaded_surface()
        surface.update_heatmap("heatmap-4", HeatmapStyle(radius=10, blur=20, opacity=0.5))

        (cmd,) = page.commands()
        assert cmd["type"] == "heatmap.set_style"
        assert cmd["layer_id"] == "heatmap-4"
        assert cmd["style"] == {"radius": 10, "blur": 20, "opacity": 0.5}

    def test_view_commands(self):
        page, surface = loaded_surface()
        surface.set_view_zoom(7)
        surface.set_view_center((10.0, 45.0))

        zoom, center = page.commands()
        assert zoom == {"type": "view.set_zoom", "zoom": 7.0}
        assert center["type"] == "view.set_center"
        x, y = web_mercator((10.0, 45.0))
        assert math.isclose(center["center"][0], x)
        assert math.isclose(center["center"][1], y)


class TestQueue:
    """Commands are held until the page has loaded."""

    def test_queued_until_loaded(self):
        page = FakePage()
        surface = PageSurface(page)
        surface.set_view_zoom(3)
        surface.set_view_zoom(4)

        assert page.scripts == []
        assert len(surface.pending) == 2

        surface.page_loaded(True)

        assert [c["zoom"] for c in page.commands()] == [3.0, 4.0]
        assert surface.pending == []

    def test_failed_load_keeps_queue(self, caplog):
        page = FakePage()
        surface = PageSurface(page)
        surface.set_view_zoom(3)

        with caplog.at_level("ERROR", logger="telemetrymap.bridge"):
            surface.page_loaded(False)

        assert page.scripts == []
        assert len(surface.pending) == 1
        assert "failed to load" in caplog.text

    def test_engine_mount_before_load(self):
        """A mount issued before the page loads arrives in effect order."""
        page = FakePage()
        surface = PageSurface(page)
        engine = LayerEngine(surface)
        engine.mount(DisplayConfig(), Dataset.from_arrays([1.0], [2.0], ["A"]))

        surface.page_loaded(True)

        assert [(c["type"], c.get("role")) for c in page.commands()] == [
            ("layer.add", "base"),
            ("layer.add", "markers"),
            ("view.set_zoom", None),
            ("layer.add", "control"),
            ("view.set_center", None),
        ]


class TestEvents:
    """Tests for PageEvents routing."""

    def test_mode_select_reaches_store(self):
        store = ConfigStore(DisplayConfig())
        control = ModeControl(lambda: store.config, store.on_config_change)
        events = PageEvents()
        events.on("mode.select", lambda ev: control.select(str(ev.get("value", ""))))

        events.dispatch(json.dumps({"type": "mode.select", "value": "heatmap"}))

        assert store.config.mode is MapMode.HEATMAP
        assert store.config.markers_enabled is False

    def test_error_event_becomes_surface_error(self):
        events = PageEvents()
        errors = []
        events.on_error(errors.append)

        events.dispatch(
            json.dumps(
                {"type": "error", "operation": "heatmap.set_style", "layer_id": "heatmap-4", "message": "boom"}
            )
        )

        (err,) = errors
        assert isinstance(err, SurfaceError)
        assert err.operation == "heatmap.set_style"
        assert err.handle == "heatmap-4"
        assert str(err) == "boom"

    def test_tile_errors_reported_once_per_layer(self):
        events = PageEvents()
        errors = []
        events.on_error(errors.append)
        tile_error = {"type": "error", "operation": "tile", "layer_id": "customTile-2", "message": "404"}

        for _ in range(5):
            events.dispatch(json.dumps(tile_error))
        events.dispatch(json.dumps(dict(tile_error, layer_id="customTile-5")))

        assert [e.handle for e in errors] == ["customTile-2", "customTile-5"]

    def test_malformed_events_are_dropped(self, caplog):
        events = PageEvents()
        seen = []
        events.on("mode.select", seen.append)

        with caplog.at_level("WARNING", logger="telemetrymap.bridge"):
            events.dispatch("{not json")
            events.dispatch("[1, 2]")
            events.dispatch(json.dumps({"type": "unknown"}))

        assert seen == []
        assert "malformed" in caplog.text

    def test_raising_error_callback_does_not_stop_others(self):
        events = PageEvents()
        errors = []

        def broken(err):
            raise RuntimeError("handler broke")

        events.on_error(broken)
        events.on_error(errors.append)
        events.dispatch(json.dumps({"type": "error", "message": "x"}))

        assert len(errors) == 1
