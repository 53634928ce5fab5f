"""Pure layer reconciliation.

``reconcile(state, event)`` returns the next engine state and the ordered list
of effects that bring the rendering surface in line with it. Nothing here
touches a surface; ``engine.LayerEngine`` interprets the effects.

Per run, effects are emitted in this order:

  1. points are recomputed once if the dataset changed
  2. base tiles (mount only)
  3. custom tile overlay (URL changed: remove, then add if non-empty)
  4. the data role that is not the target mode is removed
  5. markers: created when absent, replaced when data or style changed
  6. heatmap: created when absent, replaced when data changed, style
     mutated in place
  7. zoom
  8. mode control (mount only) and initial view center
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .changes import ChangeFlags, classify, resolve_mode
from .dataset import Dataset
from .layers import (
    BASE_TILE_URL,
    HeatmapLayerSpec,
    LayerSpec,
    MarkerLayerSpec,
    TileLayerSpec,
)
from .mode_control import ModeControl
from .models import (
    DisplayConfig,
    HeatmapStyle,
    LayerRole,
    LonLat,
    MapMode,
    PointSet,
)
from .reducer import ProjectionErrorHandler, Projector, reduce_samples

logger = logging.getLogger(__name__)

_ROLE_FOR_MODE = {
    MapMode.MARKERS: LayerRole.MARKERS,
    MapMode.HEATMAP: LayerRole.HEATMAP,
}

# Removal order on unmount: top of the stack first.
_UNMOUNT_ORDER = (
    LayerRole.CONTROL,
    LayerRole.HEATMAP,
    LayerRole.MARKERS,
    LayerRole.CUSTOM_TILE,
    LayerRole.BASE,
)


# ---------- events ----------
@dataclass(frozen=True)
class Mount:
    config: DisplayConfig
    dataset: Dataset = field(default_factory=Dataset.empty)
    base_tile_url: str = BASE_TILE_URL


@dataclass(frozen=True)
class Update:
    config: DisplayConfig
    dataset: Dataset


@dataclass(frozen=True)
class Unmount:
    pass


Event = Union[Mount, Update, Unmount]


# ---------- effects ----------
@dataclass(frozen=True)
class AddLayer:
    spec: LayerSpec


@dataclass(frozen=True)
class RemoveLayer:
    spec: LayerSpec


@dataclass(frozen=True)
class UpdateHeatmap:
    handle: str
    style: HeatmapStyle


@dataclass(frozen=True)
class SetViewZoom:
    zoom: float


@dataclass(frozen=True)
class SetViewCenter:
    lonlat: LonLat


Effect = Union[AddLayer, RemoveLayer, UpdateHeatmap, SetViewZoom, SetViewCenter]


@dataclass(frozen=True)
class EngineState:
    """Everything the engine remembers between runs.

    registry: layer role -> spec of the live layer in that slot. Treated as
        immutable; every run works on a copy.
    mode: the data mode currently rendered (None when no data layer).
    serial: last handle number issued, kept across unmount so handles are
        never reused on the same surface.
    """

    mounted: bool = False
    config: Optional[DisplayConfig] = None
    dataset_version: Optional[int] = None
    points: PointSet = PointSet()
    mode: Optional[MapMode] = None
    registry: Dict[LayerRole, LayerSpec] = field(default_factory=dict)
    serial: int = 0
    centered: bool = False

    def handle(self, role: LayerRole) -> Optional[str]:
        spec = self.registry.get(role)
        return spec.handle if spec is not None else None


class _Plan:
    """Accumulates registry changes and effects for one run."""

    def __init__(self, state: EngineState) -> None:
        self.registry: Dict[LayerRole, LayerSpec] = dict(state.registry)
        self.serial = state.serial
        self.effects: List[Effect] = []

    def new_handle(self, role: LayerRole) -> str:
        self.serial += 1
        return f"{role.value}-{self.serial}"

    def add(self, spec: LayerSpec) -> None:
        self.registry[spec.role] = spec
        self.effects.append(AddLayer(spec))

    def remove(self, role: LayerRole) -> None:
        spec = self.registry.pop(role, None)
        if spec is not None:
            self.effects.append(RemoveLayer(spec))

    def replace(self, spec: LayerSpec) -> None:
        self.remove(spec.role)
        self.add(spec)


def _apply_transitions(
    plan: _Plan,
    state: EngineState,
    config: DisplayConfig,
    flags: ChangeFlags,
    points: PointSet,
) -> Optional[MapMode]:
    # custom tile overlay, between base tiles and data layers
    if flags.overlay_url_changed:
        plan.remove(LayerRole.CUSTOM_TILE)
        if config.tile_url:
            plan.add(
                TileLayerSpec(
                    plan.new_handle(LayerRole.CUSTOM_TILE),
                    LayerRole.CUSTOM_TILE,
                    url=config.tile_url,
                )
            )

    target = resolve_mode(state.mode, state.config, config)

    # At most one data layer: drop the other role whatever the flags say,
    # before the target layer is created.
    for mode, role in _ROLE_FOR_MODE.items():
        if mode is not target:
            plan.remove(role)

    if target is MapMode.MARKERS:
        current = plan.registry.get(LayerRole.MARKERS)
        if current is None or flags.dataset_changed or flags.marker_style_changed:
            plan.replace(
                MarkerLayerSpec(
                    plan.new_handle(LayerRole.MARKERS),
                    LayerRole.MARKERS,
                    points=points,
                    style=config.marker_style,
                )
            )

    elif target is MapMode.HEATMAP:
        current = plan.registry.get(LayerRole.HEATMAP)
        if current is None or flags.dataset_changed:
            plan.replace(
                HeatmapLayerSpec(
                    plan.new_handle(LayerRole.HEATMAP),
                    LayerRole.HEATMAP,
                    points=points,
                    style=config.heatmap_style,
                )
            )
        elif flags.heat_style_changed:
            style = config.heatmap_style
            plan.registry[LayerRole.HEATMAP] = dataclasses.replace(current, style=style)
            plan.effects.append(UpdateHeatmap(current.handle, style))

    if flags.zoom_changed:
        plan.effects.append(SetViewZoom(config.zoom_level))

    return target


def _center_effect(
    plan: _Plan, state: EngineState, points: PointSet
) -> bool:
    if state.centered:
        return True
    if not points:
        return False
    plan.effects.append(SetViewCenter(points.points[0].lonlat))
    return True


def _points_for(
    state: EngineState,
    dataset: Dataset,
    project: Optional[Projector],
    on_error: Optional[ProjectionErrorHandler],
) -> Tuple[PointSet, bool]:
    if state.dataset_version == dataset.version:
        return state.points, False
    return reduce_samples(dataset.samples, project, on_error), True


def _mount(
    state: EngineState,
    event: Mount,
    project: Optional[Projector],
    on_error: Optional[ProjectionErrorHandler],
) -> Tuple[EngineState, List[Effect]]:
    plan = _Plan(state)
    points = reduce_samples(event.dataset.samples, project, on_error)
    flags = classify(None, event.config, None, event.dataset.version)

    plan.add(
        TileLayerSpec(
            plan.new_handle(LayerRole.BASE), LayerRole.BASE, url=event.base_tile_url
        )
    )
    # nothing rendered yet: transitions run against an empty state
    mode = _apply_transitions(plan, EngineState(), event.config, flags, points)
    plan.add(ModeControl.spec(plan.new_handle(LayerRole.CONTROL), event.config, mode))
    centered = _center_effect(plan, state, points)

    logger.debug("mount: %d points, mode=%s", len(points), mode)
    new_state = EngineState(
        mounted=True,
        config=event.config,
        dataset_version=event.dataset.version,
        points=points,
        mode=mode,
        registry=plan.registry,
        serial=plan.serial,
        centered=centered,
    )
    return new_state, plan.effects


def _update(
    state: EngineState,
    event: Update,
    project: Optional[Projector],
    on_error: Optional[ProjectionErrorHandler],
) -> Tuple[EngineState, List[Effect]]:
    plan = _Plan(state)
    points, recomputed = _points_for(state, event.dataset, project, on_error)
    flags = classify(
        state.config, event.config, state.dataset_version, event.dataset.version
    )
    if recomputed:
        logger.debug("dataset %s: %d points", event.dataset.version, len(points))

    mode = _apply_transitions(plan, state, event.config, flags, points)
    centered = _center_effect(plan, state, points)

    new_state = dataclasses.replace(
        state,
        config=event.config,
        dataset_version=event.dataset.version,
        points=points,
        mode=mode,
        registry=plan.registry,
        serial=plan.serial,
        centered=centered,
    )
    return new_state, plan.effects


def _unmount(state: EngineState) -> Tuple[EngineState, List[Effect]]:
    plan = _Plan(state)
    for role in _UNMOUNT_ORDER:
        plan.remove(role)
    return EngineState(serial=plan.serial), plan.effects


def reconcile(
    state: EngineState,
    event: Event,
    project: Optional[Projector] = None,
    on_project_error: Optional[ProjectionErrorHandler] = None,
) -> Tuple[EngineState, List[Effect]]:
    """Compute the next state and the effects that realise it.

    ``project`` maps (lon, lat) to surface coordinates; Web Mercator when
    omitted. Points it fails on are dropped and passed to
    ``on_project_error``; without a handler the failure propagates.
    Updates before mount and after unmount are ignored.
    """
    if isinstance(event, Mount):
        if state.mounted:
            return _update(
                state, Update(event.config, event.dataset), project, on_project_error
            )
        return _mount(state, event, project, on_project_error)

    if isinstance(event, Update):
        if not state.mounted:
            logger.warning("update ignored: engine is not mounted")
            return state, []
        return _update(state, event, project, on_project_error)

    if isinstance(event, Unmount):
        if not state.mounted:
            return state, []
        return _unmount(state)

    raise TypeError(f"Unknown event: {event!r}")
