"""Tests for Dataset construction in dataset.py."""

import numpy as np
import pytest

from telemetrymap.dataset import Dataset
from telemetrymap.models import LocationSample


class TestDatasetVersion:
    """Each batch gets its own version."""

    def test_new_batches_have_new_versions(self):
        a = Dataset.from_samples([LocationSample((1.0, 1.0), "A")])
        b = Dataset.from_samples([LocationSample((1.0, 1.0), "A")])
        assert a.version != b.version

    def test_empty(self):
        ds = Dataset.empty()
        assert ds.is_empty
        assert len(ds) == 0


class TestFromRecords:
    """Tests for Dataset.from_records."""

    def test_basic(self):
        ds = Dataset.from_records(
            [
                {"coordinate": [4.9, 52.3], "mac_address": "aa", "rssi": -60},
                {"coordinate": (5.1, 52.1), "mac_address": "bb"},
            ]
        )
        assert len(ds) == 2
        first = ds.samples[0]
        assert first.coordinate == (4.9, 52.3)
        assert first.entity_id == "aa"
        assert first.extra == {"rssi": -60}

    def test_missing_or_bad_coordinates_become_none(self):
        ds = Dataset.from_records(
            [
                {"mac_address": "aa"},
                {"coordinate": "4.9,52.3", "mac_address": "bb"},
                {"coordinate": [1], "mac_address": "cc"},
                {"coordinate": ["x", "y"], "mac_address": "dd"},
            ]
        )
        assert [s.coordinate for s in ds.samples] == [None, None, None, None]

    def test_custom_fields(self):
        ds = Dataset.from_records(
            [{"pos": [1, 2], "device": 7}],
            entity_field="device",
            coordinate_field="pos",
        )
        assert ds.samples[0].entity_id == "7"
        assert ds.samples[0].coordinate == (1.0, 2.0)


class TestFromArrays:
    """Tests for Dataset.from_arrays."""

    def test_columns(self):
        ds = Dataset.from_arrays(np.array([1.0, 2.0]), [3.0, 4.0], ["a", "b"])
        assert [s.coordinate for s in ds.samples] == [(1.0, 3.0), (2.0, 4.0)]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            Dataset.from_arrays([1.0], [2.0, 3.0], ["a"])


class TestFromFrame:
    """Tests for Dataset.from_frame."""

    def test_buffer(self):
        frame = {
            "series": [
                {
                    "fields": [
                        {"values": {"buffer": [{"coordinate": [1, 2], "mac_address": "m"}]}}
                    ]
                }
            ]
        }
        ds = Dataset.from_frame(frame)
        assert len(ds) == 1
        assert ds.samples[0].entity_id == "m"

    def test_plain_values_list(self):
        frame = {"series": [{"fields": [{"values": [{"coordinate": [1, 2], "mac_address": "m"}]}]}]}
        assert len(Dataset.from_frame(frame)) == 1

    @pytest.mark.parametrize(
        "frame",
        [{}, {"series": []}, {"series": [{"fields": []}]}, {"series": [{"fields": [{"values": {}}]}]}],
    )
    def test_malformed_frames_are_empty(self, frame):
        assert Dataset.from_frame(frame).is_empty
