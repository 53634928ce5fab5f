# The Qt host lives in telemetrymap.widget and is imported from there, so
# the reconciliation core can be used without PySide6 being importable.
from .models import (
    DisplayConfig,
    MarkerStyle,
    HeatmapStyle,
    LocationSample,
    ProjectedPoint,
    PointSet,
    MapMode,
    LayerRole,
    LonLat,
)
from .dataset import Dataset
from .reducer import reduce_samples
from .changes import ChangeFlags, classify, resolve_mode
from .layers import (
    LayerSpec,
    TileLayerSpec,
    MarkerLayerSpec,
    HeatmapLayerSpec,
    ModeControlSpec,
)
from .reconcile import EngineState, reconcile
from .engine import LayerEngine
from .bridge import PageEvents, PageSurface
from .mode_control import ModeControl
from .config import ConfigStore
from .exceptions import TelemetryMapError, ConfigError, SurfaceError

__all__ = [
    "DisplayConfig",
    "MarkerStyle",
    "HeatmapStyle",
    "LocationSample",
    "ProjectedPoint",
    "PointSet",
    "MapMode",
    "LayerRole",
    "LonLat",
    "Dataset",
    # Core pipeline
    "reduce_samples",
    "ChangeFlags",
    "classify",
    "resolve_mode",
    "EngineState",
    "reconcile",
    "LayerEngine",
    "PageSurface",
    "PageEvents",
    # Layer descriptions
    "LayerSpec",
    "TileLayerSpec",
    "MarkerLayerSpec",
    "HeatmapLayerSpec",
    "ModeControlSpec",
    # Configuration
    "ModeControl",
    "ConfigStore",
    # Errors
    "TelemetryMapError",
    "ConfigError",
    "SurfaceError",
]
