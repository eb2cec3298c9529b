"""Tests for settings management."""

import json

import pytest

from config.exceptions import ConfigurationError
from storage.settings import AppSettings, DisplayMode, SettingsManager, get_settings_manager


class TestAppSettings:
    """Tests for AppSettings dataclass."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.display_mode == "total"
        assert settings.interfaces == []

    def test_to_dict(self):
        data = AppSettings(display_mode="speed", interfaces=["en0"]).to_dict()
        assert data == {"display_mode": "speed", "interfaces": ["en0"]}

    def test_from_dict(self):
        settings = AppSettings.from_dict({"display_mode": "speed", "interfaces": ["en0", "en1"]})
        assert settings.display_mode == "speed"
        assert settings.interfaces == ["en0", "en1"]

    def test_unknown_mode_falls_back_to_total(self):
        settings = AppSettings.from_dict({"display_mode": "latency"})
        assert settings.display_mode == "total"

    def test_bad_interfaces_ignored(self):
        assert AppSettings.from_dict({"interfaces": "en0"}).interfaces == []


class TestDisplayMode:
    """Tests for DisplayMode."""

    def test_popover_shows_the_other_pair(self):
        assert DisplayMode.SPEED.popover_labels == ("Total Download:", "Total Upload:")
        assert DisplayMode.TOTAL.popover_labels == ("Download Speed:", "Upload Speed:")


class TestSettingsManager:
    """Tests for SettingsManager."""

    def test_defaults_without_file(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        assert manager.get_display_mode() is DisplayMode.TOTAL
        assert manager.get_interfaces() == []

    def test_display_mode_persists(self, temp_data_dir):
        SettingsManager(temp_data_dir).set_display_mode(DisplayMode.SPEED)

        assert SettingsManager(temp_data_dir).get_display_mode() is DisplayMode.SPEED

    def test_display_mode_from_string(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        manager.set_display_mode("speed")
        assert manager.get_display_mode() is DisplayMode.SPEED

    def test_invalid_display_mode_raises(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        with pytest.raises(ConfigurationError):
            manager.set_display_mode("devices")
        assert manager.get_display_mode() is DisplayMode.TOTAL

    def test_interfaces_persist(self, temp_data_dir):
        SettingsManager(temp_data_dir).set_interfaces(["en0", "en1"])

        manager = SettingsManager(temp_data_dir)
        assert manager.get_interfaces() == ["en0", "en1"]

    def test_get_interfaces_returns_copy(self, temp_data_dir):
        manager = SettingsManager(temp_data_dir)
        manager.get_interfaces().append("en9")
        assert manager.get_interfaces() == []

    def test_corrupt_file_uses_defaults(self, temp_data_dir):
        (temp_data_dir / "settings.json").write_text("{broken")
        assert SettingsManager(temp_data_dir).get_display_mode() is DisplayMode.TOTAL

    def test_non_object_file_uses_defaults(self, temp_data_dir):
        (temp_data_dir / "settings.json").write_text(json.dumps(["speed"]))
        assert SettingsManager(temp_data_dir).get_interfaces() == []


def test_get_settings_manager_uses_given_dir(temp_data_dir):
    manager = get_settings_manager(temp_data_dir)
    assert manager.settings_file == temp_data_dir / "settings.json"
