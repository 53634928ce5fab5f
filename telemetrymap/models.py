from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .utils import clamp, colormap_gradient, parse_bool, parse_float, parse_int

logger = logging.getLogger(__name__)

# Color type: "#RRGGBB", "rgba(...)", CSS color names, or (r, g, b[, a]) tuples
Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]
LonLat = Tuple[float, float]  # (lon, lat) - geographic order, like GeoJSON
XY = Tuple[float, float]  # projected map coordinate (EPSG:3857 metres)


def _color_to_css(c: Color) -> str:
    """
    Convert color into a CSS color string.
    - Strings ("#RRGGBB", "rgba(...)", color names) pass through.
    - (r,g,b) / (r,g,b,a) tuples become rgba(); a tuple alpha above 1 is read as 0..255.
    """
    if isinstance(c, str):
        return c

    if len(c) == 3:
        r, g, b = c
        return f"rgba({r},{g},{b},1.0)"

    r, g, b, a0 = c
    a = a0 / 255.0 if a0 > 1 else float(a0)
    return f"rgba({r},{g},{b},{a})"


class MapMode(str, enum.Enum):
    """Visual encoding of the telemetry points."""

    MARKERS = "markers"
    HEATMAP = "heatmap"


class LayerRole(str, enum.Enum):
    """Fixed slots in the map's rendering stack."""

    BASE = "base"
    CUSTOM_TILE = "customTile"
    MARKERS = "markers"
    HEATMAP = "heatmap"
    CONTROL = "control"


@dataclass(frozen=True)
class LocationSample:
    """One raw telemetry sample.

    coordinate: (lon, lat), or None when the source record had no usable
        coordinate.
    entity_id: id of the tracked device (e.g. a MAC address).
    extra: all other fields of the source record.
    """

    coordinate: Optional[LonLat]
    entity_id: str
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class ProjectedPoint:
    """A sample's coordinate reprojected into the map projection."""

    x: float
    y: float
    entity_id: str = ""
    lonlat: Optional[LonLat] = None

    @property
    def screen_coordinate(self) -> XY:
        return (self.x, self.y)


@dataclass(frozen=True)
class PointSet:
    """Ordered points, at most one per entity, in first-seen order."""

    points: Tuple[ProjectedPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __bool__(self) -> bool:
        return bool(self.points)

    @property
    def entity_ids(self) -> List[str]:
        return [p.entity_id for p in self.points]

    def to_js(self) -> List[List[float]]:
        return [[float(p.x), float(p.y)] for p in self.points]


@dataclass(frozen=True)
class MarkerStyle:
    """
    Marker style (rendered as a circle).

    radius: pixels
    fill_color: marker fill
    stroke_color / stroke_width: marker outline
    """

    radius: float = 5.0
    fill_color: Color = "#ff3333"
    stroke_color: Color = "#000000"
    stroke_width: float = 1.0

    def to_js(self) -> Dict[str, Any]:
        return {
            "radius": float(self.radius),
            "fill": _color_to_css(self.fill_color),
            "stroke": _color_to_css(self.stroke_color),
            "stroke_width": float(self.stroke_width),
        }


@dataclass(frozen=True)
class HeatmapStyle:
    """
    Heatmap layer parameters.

    radius / blur: pixels
    opacity: 0..1
    gradient: CSS color stops, empty for the renderer default
    """

    radius: int = 8
    blur: int = 15
    opacity: float = 1.0
    gradient: Tuple[str, ...] = ()

    def to_js(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "radius": int(self.radius),
            "blur": int(self.blur),
            "opacity": clamp(self.opacity, 0.0, 1.0),
        }
        if self.gradient:
            out["gradient"] = list(self.gradient)
        return out


@dataclass(frozen=True)
class DisplayConfig:
    """
    Display configuration snapshot, compared field by field across updates.

    markers_enabled / heatmap_enabled are expected to be mutually exclusive;
    the layer engine resolves the cases where they are not.
    """

    markers_enabled: bool = True
    heatmap_enabled: bool = False
    tile_url: str = ""
    zoom_level: float = 2.0
    marker_radius: float = 5.0
    marker_color: Color = "#ff3333"
    marker_stroke: Color = "#000000"
    heat_radius: int = 8
    heat_blur: int = 15
    heat_opacity: float = 1.0
    heat_colormap: str = ""

    @property
    def mode(self) -> Optional[MapMode]:
        """The configured mode, or None when the flags are inconsistent."""
        if self.markers_enabled and not self.heatmap_enabled:
            return MapMode.MARKERS
        if self.heatmap_enabled and not self.markers_enabled:
            return MapMode.HEATMAP
        return None

    @property
    def marker_style(self) -> MarkerStyle:
        return MarkerStyle(
            radius=self.marker_radius,
            fill_color=self.marker_color,
            stroke_color=self.marker_stroke,
        )

    @property
    def heatmap_style(self) -> HeatmapStyle:
        try:
            gradient = tuple(colormap_gradient(self.heat_colormap))
        except ValueError:
            logger.warning("unknown heat colormap %r; using default gradient", self.heat_colormap)
            gradient = ()
        return HeatmapStyle(
            radius=self.heat_radius,
            blur=self.heat_blur,
            opacity=self.heat_opacity,
            gradient=gradient,
        )

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "DisplayConfig":
        """Build a config from panel options (``markersLayer``, ``heat_blur``, ...).

        Missing keys take the defaults; numeric fields accept numeric strings.
        """
        d = cls()
        return cls(
            markers_enabled=parse_bool(options.get("markersLayer"), d.markers_enabled),
            heatmap_enabled=parse_bool(options.get("heatmapLayer"), d.heatmap_enabled),
            tile_url=str(options.get("tile_url") or ""),
            zoom_level=parse_float(options.get("zoom_level"), d.zoom_level),
            marker_radius=parse_float(options.get("marker_radius"), d.marker_radius),
            marker_color=options.get("marker_color") or d.marker_color,
            marker_stroke=options.get("marker_stroke") or d.marker_stroke,
            heat_radius=parse_int(options.get("heat_radius"), d.heat_radius),
            heat_blur=parse_int(options.get("heat_blur"), d.heat_blur),
            heat_opacity=parse_float(options.get("heat_opacity"), d.heat_opacity),
            heat_colormap=str(options.get("heat_colormap") or ""),
        )

    def to_options(self) -> Dict[str, Any]:
        return {
            "markersLayer": self.markers_enabled,
            "heatmapLayer": self.heatmap_enabled,
            "tile_url": self.tile_url,
            "zoom_level": self.zoom_level,
            "marker_radius": self.marker_radius,
            "marker_color": self.marker_color,
            "marker_stroke": self.marker_stroke,
            "heat_radius": self.heat_radius,
            "heat_blur": self.heat_blur,
            "heat_opacity": self.heat_opacity,
            "heat_colormap": self.heat_colormap,
        }
