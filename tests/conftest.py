"""Shared fixtures: a recording rendering surface and sample batches.

The surface stands in for the Qt/OpenLayers widget. It records every call in
order so tests can assert exactly which layer operations a reconciliation
produced, and it projects with a trivial identity so points are easy to
check.
"""

from typing import Any, List, Optional, Set, Tuple

import pytest

from telemetrymap.dataset import Dataset
from telemetrymap.models import DisplayConfig, LocationSample


class RecordingSurface:
    """Fake rendering surface that records calls as (operation, detail) tuples."""

    def __init__(self, fail_on: Optional[Set[str]] = None, max_lon: Optional[float] = None):
        self.calls: List[Tuple[str, Any]] = []
        self.live: dict = {}
        self.zoom: Optional[float] = None
        self.center = None
        self.fail_on = set(fail_on or ())
        self.max_lon = max_lon

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise RuntimeError(f"{op} failed")

    def add_layer(self, spec):
        self.calls.append(("add", spec.role.value))
        self._maybe_fail("add")
        self.live[spec.handle] = spec

    def remove_layer(self, spec):
        self.calls.append(("remove", spec.role.value))
        self._maybe_fail("remove")
        self.live.pop(spec.handle, None)

    def update_heatmap(self, handle, style):
        self.calls.append(("update_heatmap", handle))
        self._maybe_fail("update_heatmap")

    def set_view_zoom(self, zoom):
        self.calls.append(("zoom", zoom))
        self._maybe_fail("zoom")
        self.zoom = zoom

    def set_view_center(self, lonlat):
        self.calls.append(("center", lonlat))
        self.center = lonlat

    def project(self, lonlat):
        if self.max_lon is not None and lonlat[0] > self.max_lon:
            raise ValueError(f"cannot reproject {lonlat!r}")
        return (float(lonlat[0]), float(lonlat[1]))

    # helpers
    def ops(self, *kinds: str) -> List[Tuple[str, Any]]:
        """Recorded calls, optionally filtered by operation name."""
        if not kinds:
            return list(self.calls)
        return [c for c in self.calls if c[0] in kinds]

    def live_roles(self) -> List[str]:
        return sorted(spec.role.value for spec in self.live.values())

    def reset(self) -> None:
        self.calls.clear()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def markers_config():
    return DisplayConfig(markers_enabled=True, heatmap_enabled=False)


@pytest.fixture
def heatmap_config():
    return DisplayConfig(markers_enabled=False, heatmap_enabled=True)


@pytest.fixture
def dataset():
    return Dataset.from_samples(
        [
            LocationSample(coordinate=(1.0, 1.0), entity_id="A"),
            LocationSample(coordinate=(2.0, 2.0), entity_id="A"),
            LocationSample(coordinate=(3.0, 3.0), entity_id="B"),
        ]
    )
