"""Tests für utils/settings.py und cli/types.py."""

import json

import pytest

from cli.types import DisplayMode, RefreshInterval
from utils.settings import (
    DISPLAY_MODE_KEY,
    REFRESH_INTERVAL_KEY,
    Settings,
)


class TestSettingsLoad:
    """Tests für Settings.load()."""

    def test_defaults_without_file(self, prefs_file):
        settings = Settings.load()

        assert settings.display_mode is DisplayMode.text
        assert settings.refresh_interval is RefreshInterval.fiveMinutes

    def test_loads_stored_values(self, prefs_file):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text(
            json.dumps({"displayMode": "barChart", "refreshInterval": 900})
        )

        settings = Settings.load()

        assert settings.display_mode is DisplayMode.barChart
        assert settings.refresh_interval is RefreshInterval.fifteenMinutes

    @pytest.mark.parametrize(
        "stored",
        [
            {"displayMode": "donut", "refreshInterval": 42},
            {"displayMode": 3, "refreshInterval": "soon"},
            {"displayMode": None, "refreshInterval": True},
        ],
        ids=["unknown_values", "wrong_types", "null_and_bool"],
    )
    def test_invalid_values_fall_back(self, prefs_file, stored):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text(json.dumps(stored))

        settings = Settings.load()

        assert settings.display_mode is DisplayMode.text
        assert settings.refresh_interval is RefreshInterval.fiveMinutes

    def test_corrupt_file_falls_back(self, prefs_file):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text("{not json")

        settings = Settings.load()

        assert settings.display_mode is DisplayMode.text

    def test_non_dict_file_falls_back(self, prefs_file):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text("[1, 2, 3]")

        assert Settings.load().refresh_interval is RefreshInterval.fiveMinutes


class TestSettingsChanges:
    """Tests für Setter, Persistenz und Observer."""

    def test_change_is_persisted(self, prefs_file):
        settings = Settings.load()

        settings.display_mode = DisplayMode.pieChart
        settings.refresh_interval = RefreshInterval.oneMinute

        stored = json.loads(prefs_file.read_text())
        assert stored == {"displayMode": "pieChart", "refreshInterval": 60}
        reloaded = Settings.load()
        assert reloaded.display_mode is DisplayMode.pieChart
        assert reloaded.refresh_interval is RefreshInterval.oneMinute

    def test_persist_false_writes_nothing(self, prefs_file):
        settings = Settings(persist=False)

        settings.display_mode = DisplayMode.barChart

        assert not prefs_file.exists()

    def test_raw_values_are_coerced(self):
        settings = Settings(persist=False)

        settings.display_mode = "barChart"
        settings.refresh_interval = 600

        assert settings.display_mode is DisplayMode.barChart
        assert settings.refresh_interval is RefreshInterval.tenMinutes

    def test_invalid_value_raises(self):
        settings = Settings(persist=False)

        with pytest.raises(ValueError):
            settings.refresh_interval = 42

    def test_listener_notified(self):
        settings = Settings(persist=False)
        events = []
        settings.subscribe(lambda key, value: events.append((key, value)))

        settings.display_mode = DisplayMode.pieChart
        settings.refresh_interval = RefreshInterval.twoMinutes

        assert events == [
            (DISPLAY_MODE_KEY, DisplayMode.pieChart),
            (REFRESH_INTERVAL_KEY, RefreshInterval.twoMinutes),
        ]

    def test_unchanged_value_does_not_notify(self, prefs_file):
        settings = Settings()
        events = []
        settings.subscribe(lambda key, value: events.append(key))

        settings.display_mode = DisplayMode.text

        assert events == []
        assert not prefs_file.exists()

    def test_unsubscribe(self):
        settings = Settings(persist=False)
        events = []
        unsubscribe = settings.subscribe(lambda key, value: events.append(key))

        unsubscribe()
        unsubscribe()
        settings.display_mode = DisplayMode.barChart

        assert events == []

    def test_failing_listener_does_not_block_others(self):
        settings = Settings(persist=False)
        events = []

        def broken(_key, _value):
            raise RuntimeError("boom")

        settings.subscribe(broken)
        settings.subscribe(lambda key, value: events.append(key))

        settings.display_mode = DisplayMode.barChart

        assert settings.display_mode is DisplayMode.barChart
        assert events == [DISPLAY_MODE_KEY]

    def test_save_error_keeps_value(self, prefs_file, monkeypatch):
        """Schreibfehler: Wert gilt für die laufende Session trotzdem."""
        import utils.preferences

        def fail(_prefs):
            raise PermissionError("read-only")

        monkeypatch.setattr(utils.preferences, "save_preferences", fail)
        settings = Settings()

        settings.refresh_interval = RefreshInterval.thirtyMinutes

        assert settings.refresh_interval is RefreshInterval.thirtyMinutes


class TestTypes:
    """Tests für DisplayMode und RefreshInterval."""

    @pytest.mark.parametrize(
        "mode,name",
        [
            (DisplayMode.text, "Text"),
            (DisplayMode.pieChart, "Pie Charts"),
            (DisplayMode.barChart, "Bar Chart"),
        ],
    )
    def test_display_mode_names(self, mode, name):
        assert mode.display_name == name

    @pytest.mark.parametrize(
        "interval,name",
        [
            (RefreshInterval.oneMinute, "1 minute"),
            (RefreshInterval.twoMinutes, "2 minutes"),
            (RefreshInterval.thirtyMinutes, "30 minutes"),
        ],
    )
    def test_refresh_interval_names(self, interval, name):
        assert interval.display_name == name

    def test_allowed_intervals(self):
        assert [i.value for i in RefreshInterval] == [60, 120, 300, 600, 900, 1800]

    def test_parse(self):
        assert RefreshInterval.parse("300") is RefreshInterval.fiveMinutes
        assert RefreshInterval.parse(False) is None
        assert DisplayMode.parse("pieChart") is DisplayMode.pieChart
        assert DisplayMode.parse("PieChart") is None
