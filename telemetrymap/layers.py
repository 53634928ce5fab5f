"""Declarative layer descriptions handed to a rendering surface.

A spec is immutable. Its ``handle`` is the opaque id the surface uses for the
live layer; replacing a layer means a new spec with a new handle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .models import HeatmapStyle, LayerRole, MarkerStyle, PointSet

BASE_TILE_URL = (
    "https://{1-4}.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}{r}.png"
)

# Stacking order: base < custom tiles < data layers. Controls are not layers.
Z_BASE = 0
Z_TILE_OVERLAY = 1
Z_DATA = 2


@dataclass(frozen=True)
class LayerSpec:
    handle: str
    role: LayerRole

    kind = "layer"
    z_index = Z_BASE

    def to_js(self) -> Dict[str, Any]:
        return {
            "layer_id": self.handle,
            "role": self.role.value,
            "kind": self.kind,
            "z_index": self.z_index,
        }


@dataclass(frozen=True)
class TileLayerSpec(LayerSpec):
    """XYZ raster tile layer (base map or custom overlay)."""

    url: str = ""

    kind = "tile"

    @property
    def z_index(self) -> int:  # type: ignore[override]
        return Z_BASE if self.role is LayerRole.BASE else Z_TILE_OVERLAY

    def to_js(self) -> Dict[str, Any]:
        out = super().to_js()
        out["url"] = self.url
        return out


@dataclass(frozen=True)
class MarkerLayerSpec(LayerSpec):
    """
    Vector layer drawing one circle per point.

    The style is fixed at construction; a style change means a new layer.
    """

    points: PointSet = PointSet()
    style: MarkerStyle = MarkerStyle()

    kind = "vector"
    z_index = Z_DATA

    def to_js(self) -> Dict[str, Any]:
        out = super().to_js()
        out["coords"] = self.points.to_js()
        out["style"] = self.style.to_js()
        return out


@dataclass(frozen=True)
class HeatmapLayerSpec(LayerSpec):
    """
    Density heatmap over the points.

    radius / blur / opacity / gradient can be changed on the live layer.
    """

    points: PointSet = PointSet()
    style: HeatmapStyle = HeatmapStyle()

    kind = "heatmap"
    z_index = Z_DATA

    def to_js(self) -> Dict[str, Any]:
        out = super().to_js()
        out["coords"] = self.points.to_js()
        out["style"] = self.style.to_js()
        return out


@dataclass(frozen=True)
class ModeControlSpec(LayerSpec):
    """Select box overlaid on the map for switching the display mode."""

    options: Tuple[Tuple[str, str], ...] = ()
    selected: str = ""

    kind = "control"

    def to_js(self) -> Dict[str, Any]:
        out = super().to_js()
        out["options"] = [{"value": v, "label": label} for v, label in self.options]
        out["selected"] = self.selected
        return out
