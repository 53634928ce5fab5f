"""Versioned batches of telemetry samples.

A dataset is delivered wholesale on every update; there is no delta feed.
Each batch gets a fresh ``version`` so consumers can tell "new batch" from
"same batch" without comparing samples.

Records are plain mappings, as produced by JSON decoding:

    {"coordinate": [lon, lat], "mac_address": "aa:bb:..", "rssi": -70, ...}

Records without a usable coordinate are kept with ``coordinate=None`` and
skipped later by the point reducer.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np

from .models import LocationSample, LonLat

logger = logging.getLogger(__name__)

DEFAULT_ENTITY_FIELD = "mac_address"
DEFAULT_COORDINATE_FIELD = "coordinate"

_versions = itertools.count(1)


def _next_version() -> int:
    return next(_versions)


def _parse_coordinate(value: Any) -> Optional[LonLat]:
    if value is None or isinstance(value, (str, bytes)):
        return None
    try:
        lon, lat = value
        return (float(lon), float(lat))
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Dataset:
    """One batch of samples in arrival order."""

    samples: Tuple[LocationSample, ...] = ()
    version: int = field(default_factory=_next_version)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def is_empty(self) -> bool:
        return not self.samples

    @classmethod
    def empty(cls) -> "Dataset":
        return cls(())

    @classmethod
    def from_samples(cls, samples: Iterable[LocationSample]) -> "Dataset":
        return cls(tuple(samples))

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        *,
        entity_field: str = DEFAULT_ENTITY_FIELD,
        coordinate_field: str = DEFAULT_COORDINATE_FIELD,
    ) -> "Dataset":
        samples = []
        skipped = 0
        for rec in records:
            coord = _parse_coordinate(rec.get(coordinate_field))
            if coord is None:
                skipped += 1
            extra = {
                k: v for k, v in rec.items() if k not in (coordinate_field, entity_field)
            }
            samples.append(
                LocationSample(
                    coordinate=coord,
                    entity_id=str(rec.get(entity_field, "")),
                    extra=extra,
                )
            )
        if skipped:
            logger.debug("%d of %d records have no usable coordinate", skipped, len(samples))
        return cls(tuple(samples))

    @classmethod
    def from_arrays(
        cls,
        lon: Sequence[float],
        lat: Sequence[float],
        entity_ids: Sequence[str],
    ) -> "Dataset":
        """Build a batch from parallel columns (numpy arrays or lists)."""
        lon_a = np.asarray(lon, dtype=np.float64)
        lat_a = np.asarray(lat, dtype=np.float64)
        if not (len(lon_a) == len(lat_a) == len(entity_ids)):
            raise ValueError("lon/lat/entity_ids must have the same length")
        return cls(
            tuple(
                LocationSample(coordinate=(float(x), float(y)), entity_id=str(e))
                for x, y, e in zip(lon_a, lat_a, entity_ids)
            )
        )

    @classmethod
    def from_frame(
        cls,
        frame: Mapping[str, Any],
        *,
        entity_field: str = DEFAULT_ENTITY_FIELD,
        coordinate_field: str = DEFAULT_COORDINATE_FIELD,
    ) -> "Dataset":
        """
        Extract the records buffer from a dashboard data frame:

            {"series": [{"fields": [{"values": {"buffer": [record, ...]}}]}]}

        A frame without series, fields or buffer yields an empty dataset.
        """
        try:
            values = frame["series"][0]["fields"][0]["values"]
        except (KeyError, IndexError, TypeError):
            logger.debug("data frame has no records buffer")
            return cls.empty()

        buffer = values.get("buffer") if isinstance(values, Mapping) else values
        if not isinstance(buffer, Sequence) or isinstance(buffer, (str, bytes)):
            return cls.empty()
        return cls.from_records(
            (r for r in buffer if isinstance(r, Mapping)),
            entity_field=entity_field,
            coordinate_field=coordinate_field,
        )
