from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Optional

from .models import XY, LocationSample, LonLat, PointSet, ProjectedPoint
from .projection import web_mercator

logger = logging.getLogger(__name__)

Projector = Callable[[LonLat], XY]
# (entity_id, lonlat, error) for a coordinate the projector rejected
ProjectionErrorHandler = Callable[[str, LonLat, Exception], None]


def reduce_samples(
    samples: Iterable[LocationSample],
    project: Optional[Projector] = None,
    on_error: Optional[ProjectionErrorHandler] = None,
) -> PointSet:
    """Reduce a batch of samples to one projected point per entity.

    The first sample seen for an entity wins, later ones are ignored even if
    they are newer. Output order is first-seen order. Samples without a
    coordinate are skipped; coordinates are otherwise passed to ``project``
    untouched.

    If ``project`` raises and ``on_error`` is given, the entity is left out
    and ``on_error`` is called; otherwise the exception propagates.
    """
    project = project or web_mercator

    first_seen: Dict[str, LonLat] = {}
    missing = 0
    for s in samples:
        if s.coordinate is None:
            missing += 1
            continue
        if s.entity_id not in first_seen:
            first_seen[s.entity_id] = s.coordinate

    if missing:
        logger.debug("skipped %d samples without coordinate", missing)

    points = []
    for entity_id, lonlat in first_seen.items():
        try:
            x, y = project(lonlat)
        except Exception as e:
            if on_error is None:
                raise
            on_error(entity_id, lonlat, e)
            continue
        points.append(ProjectedPoint(x=x, y=y, entity_id=entity_id, lonlat=lonlat))
    return PointSet(tuple(points))
