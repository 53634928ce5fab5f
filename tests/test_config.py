"""Tests for ConfigStore in config.py."""

import json

import pytest

from telemetrymap.config import ConfigStore
from telemetrymap.exceptions import ConfigError
from telemetrymap.models import DisplayConfig, MapMode


class TestConfigStore:
    """Tests for ConfigStore."""

    def test_default(self):
        assert ConfigStore().config == DisplayConfig()

    def test_notifies_in_order(self):
        store = ConfigStore()
        seen = []
        store.subscribe(lambda c: seen.append(("first", c.zoom_level)))
        store.subscribe(lambda c: seen.append(("second", c.zoom_level)))

        store.update(zoom_level=5)

        assert seen == [("first", 5), ("second", 5)]
        assert store.config.zoom_level == 5

    def test_equal_config_is_not_broadcast(self):
        store = ConfigStore()
        seen = []
        store.subscribe(seen.append)
        store.on_config_change(DisplayConfig())
        assert seen == []

    def test_unsubscribe(self):
        store = ConfigStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        store.update(heat_blur=3)
        assert seen == []

    def test_unknown_field(self):
        with pytest.raises(ConfigError):
            ConfigStore().update(no_such_field=1)

    def test_from_options(self):
        store = ConfigStore.from_options({"markersLayer": False, "heatmapLayer": True})
        assert store.config.mode is MapMode.HEATMAP


class TestFromJsonFile:
    """Tests for ConfigStore.from_json_file."""

    def test_load(self, tmp_path):
        p = tmp_path / "options.json"
        p.write_text(json.dumps({"tile_url": "http://t/{z}/{x}/{y}", "heat_opacity": "0.5"}))
        store = ConfigStore.from_json_file(p)
        assert store.config.tile_url == "http://t/{z}/{x}/{y}"
        assert store.config.heat_opacity == 0.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigStore.from_json_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        p = tmp_path / "bad.json"
        p.write_text("{not json")
        with pytest.raises(ConfigError):
            ConfigStore.from_json_file(p)

    def test_not_an_object(self, tmp_path):
        p = tmp_path / "list.json"
        p.write_text("[1, 2]")
        with pytest.raises(ConfigError):
            ConfigStore.from_json_file(p)
