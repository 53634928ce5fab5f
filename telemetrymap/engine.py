from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .dataset import Dataset
from .exceptions import SurfaceError
from .layers import BASE_TILE_URL
from .models import DisplayConfig, LayerRole, LonLat
from .reconcile import (
    AddLayer,
    Effect,
    EngineState,
    Event,
    Mount,
    RemoveLayer,
    SetViewCenter,
    SetViewZoom,
    Unmount,
    Update,
    UpdateHeatmap,
    reconcile,
)
from .surface import RenderingSurface

logger = logging.getLogger(__name__)


class LayerEngine:
    """
    Keeps a rendering surface's layers in line with config + data.

    The surface is owned for the engine's mounted lifetime: ``mount`` creates
    the base layers, ``update`` reconciles, ``unmount`` releases every layer
    the engine created. Runs synchronously on the caller's thread.
    """

    def __init__(self, surface: RenderingSurface, *, base_tile_url: str = BASE_TILE_URL):
        self._surface = surface
        self._base_tile_url = base_tile_url
        self._state = EngineState()
        self._error_handlers: List[Callable[[SurfaceError], None]] = []

    # ---------- state ----------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_mounted(self) -> bool:
        return self._state.mounted

    @property
    def registry(self) -> Dict[LayerRole, str]:
        """Role -> handle of every live layer."""
        return {role: spec.handle for role, spec in self._state.registry.items()}

    def on_error(self, callback: Callable[[SurfaceError], None]) -> None:
        self._error_handlers.append(callback)

    # ---------- lifecycle ----------
    def mount(self, config: DisplayConfig, dataset: Optional[Dataset] = None) -> List[Effect]:
        return self._run(
            Mount(
                config,
                dataset if dataset is not None else Dataset.empty(),
                base_tile_url=self._base_tile_url,
            )
        )

    def update(self, config: DisplayConfig, dataset: Dataset) -> List[Effect]:
        return self._run(Update(config, dataset))

    def unmount(self) -> List[Effect]:
        return self._run(Unmount())

    # ---------- effect interpreter ----------
    def _run(self, event: Event) -> List[Effect]:
        rejected: List[SurfaceError] = []

        def project_failed(entity_id: str, lonlat: LonLat, exc: Exception) -> None:
            logger.warning("cannot project %r for %s: %s", lonlat, entity_id, exc)
            rejected.append(SurfaceError(str(exc), operation="project", handle=entity_id))

        self._state, effects = reconcile(
            self._state, event, self._surface.project, on_project_error=project_failed
        )
        for effect in effects:
            self._apply(effect)
        # projection failures are reported after the effects are applied
        for err in rejected:
            self._report(err)
        return effects

    def _apply(self, effect: Effect) -> None:
        # A failing command must not leave the rest of the run unapplied.
        try:
            self._dispatch(effect)
        except Exception as e:
            logger.exception("rendering surface failed on %r", effect)
            err = e if isinstance(e, SurfaceError) else SurfaceError(
                str(e), operation=type(effect).__name__, handle=_handle_of(effect)
            )
            self._report(err)

    def _report(self, err: SurfaceError) -> None:
        for cb in list(self._error_handlers):
            try:
                cb(err)
            except Exception:
                logger.exception("error callback %r failed", cb)

    def _dispatch(self, effect: Effect) -> None:
        s = self._surface
        if isinstance(effect, AddLayer):
            s.add_layer(effect.spec)
        elif isinstance(effect, RemoveLayer):
            s.remove_layer(effect.spec)
        elif isinstance(effect, UpdateHeatmap):
            s.update_heatmap(effect.handle, effect.style)
        elif isinstance(effect, SetViewZoom):
            s.set_view_zoom(effect.zoom)
        elif isinstance(effect, SetViewCenter):
            s.set_view_center(effect.lonlat)
        else:
            raise TypeError(f"Unknown effect: {effect!r}")


def _handle_of(effect: Any) -> str:
    spec = getattr(effect, "spec", None)
    if spec is not None:
        return spec.handle
    return getattr(effect, "handle", "")
