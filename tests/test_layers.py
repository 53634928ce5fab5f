"""Tests for the layer descriptions in layers.py (command payloads)."""

from telemetrymap.layers import (
    BASE_TILE_URL,
    Z_BASE,
    Z_DATA,
    Z_TILE_OVERLAY,
    HeatmapLayerSpec,
    MarkerLayerSpec,
    TileLayerSpec,
)
from telemetrymap.models import HeatmapStyle, LayerRole, MarkerStyle, PointSet, ProjectedPoint

POINTS = PointSet((ProjectedPoint(1.0, 2.0, "A"), ProjectedPoint(3.0, 4.0, "B")))


class TestTileLayerSpec:
    """Tests for TileLayerSpec."""

    def test_base(self):
        js = TileLayerSpec("base-1", LayerRole.BASE, url=BASE_TILE_URL).to_js()
        assert js == {
            "layer_id": "base-1",
            "role": "base",
            "kind": "tile",
            "z_index": Z_BASE,
            "url": BASE_TILE_URL,
        }

    def test_overlay_sits_above_base(self):
        spec = TileLayerSpec("customTile-2", LayerRole.CUSTOM_TILE, url="http://t")
        assert spec.z_index == Z_TILE_OVERLAY
        assert Z_BASE < Z_TILE_OVERLAY < Z_DATA


class TestDataLayerSpecs:
    """Tests for MarkerLayerSpec and HeatmapLayerSpec."""

    def test_markers(self):
        js = MarkerLayerSpec("markers-3", LayerRole.MARKERS, points=POINTS, style=MarkerStyle()).to_js()
        assert js["kind"] == "vector"
        assert js["z_index"] == Z_DATA
        assert js["coords"] == [[1.0, 2.0], [3.0, 4.0]]
        assert js["style"]["radius"] == 5.0

    def test_heatmap(self):
        spec = HeatmapLayerSpec(
            "heatmap-4", LayerRole.HEATMAP, points=POINTS, style=HeatmapStyle(radius=10, blur=5, opacity=0.5)
        )
        js = spec.to_js()
        assert js["kind"] == "heatmap"
        assert js["style"] == {"radius": 10, "blur": 5, "opacity": 0.5}

    def test_empty_points(self):
        js = MarkerLayerSpec("markers-5", LayerRole.MARKERS).to_js()
        assert js["coords"] == []

    def test_specs_are_values(self):
        a = MarkerLayerSpec("m", LayerRole.MARKERS, points=POINTS)
        b = MarkerLayerSpec("m", LayerRole.MARKERS, points=POINTS)
        assert a == b
