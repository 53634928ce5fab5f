"""What the layer engine needs from a map renderer."""

from __future__ import annotations

from typing import Protocol

from .layers import LayerSpec
from .models import XY, HeatmapStyle, LonLat


class RenderingSurface(Protocol):
    def add_layer(self, spec: LayerSpec) -> None:
        """Create the layer (or control) described by ``spec``, keyed by its handle."""

    def remove_layer(self, spec: LayerSpec) -> None:
        """Destroy the live layer created from ``spec``."""

    def update_heatmap(self, handle: str, style: HeatmapStyle) -> None:
        """Set radius / blur / opacity / gradient on a live heatmap."""

    def set_view_zoom(self, zoom: float) -> None:
        ...

    def set_view_center(self, lonlat: LonLat) -> None:
        ...

    def project(self, lonlat: LonLat) -> XY:
        """Map geographic (lon, lat) into the surface's coordinate system."""
