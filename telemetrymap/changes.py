"""Classify what changed between two (config, dataset version) snapshots.

The flags are independent of each other, so the layer engine can act on any
subset of them in a fixed order without recomputation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Optional

from .models import DisplayConfig, MapMode

logger = logging.getLogger(__name__)

MARKER_STYLE_FIELDS = ("marker_radius", "marker_color", "marker_stroke")
HEAT_STYLE_FIELDS = ("heat_radius", "heat_blur", "heat_opacity", "heat_colormap")


@dataclass(frozen=True)
class ChangeFlags:
    dataset_changed: bool = False
    markers_enabled: bool = False
    heatmap_enabled: bool = False
    markers_disabled: bool = False
    heatmap_disabled: bool = False
    overlay_url_changed: bool = False
    zoom_changed: bool = False
    marker_style_changed: bool = False
    heat_style_changed: bool = False

    @property
    def any(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def mode_enabled(self, mode: MapMode) -> bool:
        if mode is MapMode.MARKERS:
            return self.markers_enabled
        return self.heatmap_enabled

    def mode_disabled(self, mode: MapMode) -> bool:
        if mode is MapMode.MARKERS:
            return self.markers_disabled
        return self.heatmap_disabled


def _differs(prev: DisplayConfig, nxt: DisplayConfig, names) -> bool:
    return any(getattr(prev, n) != getattr(nxt, n) for n in names)


def classify(
    prev: Optional[DisplayConfig],
    nxt: DisplayConfig,
    prev_version: Optional[int],
    next_version: Optional[int],
) -> ChangeFlags:
    """Compare two snapshots.

    ``prev=None`` means nothing has been rendered yet: enabled modes count as
    freshly enabled, a non-empty overlay URL and the zoom count as changed.
    Mode flags are read from the raw configuration; inconsistent mode pairs
    are not corrected here (see ``resolve_mode``).
    """
    dataset_changed = prev_version != next_version
    if prev is None:
        return ChangeFlags(
            dataset_changed=dataset_changed,
            markers_enabled=nxt.markers_enabled,
            heatmap_enabled=nxt.heatmap_enabled,
            overlay_url_changed=bool(nxt.tile_url),
            zoom_changed=True,
        )

    return ChangeFlags(
        dataset_changed=dataset_changed,
        markers_enabled=not prev.markers_enabled and nxt.markers_enabled,
        heatmap_enabled=not prev.heatmap_enabled and nxt.heatmap_enabled,
        markers_disabled=prev.markers_enabled and not nxt.markers_enabled,
        heatmap_disabled=prev.heatmap_enabled and not nxt.heatmap_enabled,
        overlay_url_changed=prev.tile_url != nxt.tile_url,
        zoom_changed=prev.zoom_level != nxt.zoom_level,
        marker_style_changed=_differs(prev, nxt, MARKER_STYLE_FIELDS),
        heat_style_changed=_differs(prev, nxt, HEAT_STYLE_FIELDS),
    )


def resolve_mode(
    prev_mode: Optional[MapMode],
    prev: Optional[DisplayConfig],
    config: DisplayConfig,
) -> Optional[MapMode]:
    """Pick the single mode to render for ``config``.

    Consistent configs map to their mode. With both modes enabled the most
    recently switched on mode wins; if that cannot be told apart, the mode
    already on screen stays, and markers win when nothing was shown yet.
    With neither enabled nothing is rendered.
    """
    mode = config.mode
    if mode is not None:
        return mode

    if not config.markers_enabled and not config.heatmap_enabled:
        logger.warning("neither markers nor heatmap enabled; no data layer shown")
        return None

    markers_new = prev is not None and not prev.markers_enabled
    heatmap_new = prev is not None and not prev.heatmap_enabled
    if heatmap_new and not markers_new:
        chosen = MapMode.HEATMAP
    elif markers_new and not heatmap_new:
        chosen = MapMode.MARKERS
    elif prev_mode is not None:
        chosen = prev_mode
    else:
        chosen = MapMode.MARKERS
    logger.warning(
        "markers and heatmap both enabled; showing %s only", chosen.value
    )
    return chosen
