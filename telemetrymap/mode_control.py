"""Marker / heatmap mode switch embedded in the map.

The control is rendered once at mount. A user selection produces a whole new
configuration with both mode flags set together; layers only change through
the normal configuration update path.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Optional

from .layers import ModeControlSpec
from .models import DisplayConfig, LayerRole, MapMode

logger = logging.getLogger(__name__)

OPTIONS = (
    (MapMode.MARKERS.value, "Markers"),
    (MapMode.HEATMAP.value, "Heat Map"),
)


class ModeControl:
    """Turns a select-box value into a configuration change request.

    get_config: returns the current configuration.
    on_config_change: receives the new configuration.
    """

    def __init__(
        self,
        get_config: Callable[[], DisplayConfig],
        on_config_change: Callable[[DisplayConfig], None],
    ) -> None:
        self._get_config = get_config
        self._on_config_change = on_config_change

    def select(self, value: str) -> Optional[DisplayConfig]:
        """Request a switch to ``value`` ("markers" or "heatmap").

        Returns the configuration that was sent, or None when ``value`` is
        not a known mode.
        """
        try:
            mode = MapMode(value)
        except ValueError:
            logger.warning("ignoring unknown display mode %r", value)
            return None

        config = dataclasses.replace(
            self._get_config(),
            markers_enabled=mode is MapMode.MARKERS,
            heatmap_enabled=mode is MapMode.HEATMAP,
        )
        self._on_config_change(config)
        return config

    @staticmethod
    def spec(
        handle: str, config: DisplayConfig, mode: Optional[MapMode] = None
    ) -> ModeControlSpec:
        """Describe the control, preselecting the rendered mode."""
        selected = mode or config.mode
        return ModeControlSpec(
            handle,
            LayerRole.CONTROL,
            options=OPTIONS,
            selected=selected.value if selected is not None else "",
        )
