"""
Tests for YAML configuration loading.
"""

from pathlib import Path

import pytest

from taskslot.config import AppConfig, load_config
from taskslot.domain.models import SchedulingWindow


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:

    def test_defaults(self):
        config = AppConfig()

        assert config.calendar_id == "primary"
        assert config.to_window() == SchedulingWindow(
            timezone="America/Los_Angeles", start_hour=5, end_hour=24
        )
        assert config.search.step_minutes == 30
        assert config.search.max_candidates == 500
        assert config.search.default_duration_minutes == 60
        assert config.search.min_search_days == 7
        assert config.search.reminder_minutes == 20

    def test_load_from_yaml(self, tmp_path):
        path = _write(tmp_path, (
            "calendar_id: work@example.com\n"
            "window:\n"
            "  timezone: Europe/Berlin\n"
            "  start_hour: 8\n"
            "  end_hour: 18\n"
            "search:\n"
            "  step_minutes: 15\n"
        ))

        config = AppConfig.load_from_yaml(path)

        assert config.calendar_id == "work@example.com"
        assert config.timezone == "Europe/Berlin"
        assert config.to_window() == SchedulingWindow(timezone="Europe/Berlin", start_hour=8, end_hour=18)
        assert config.search.step_minutes == 15
        assert config.search.max_candidates == 500

    def test_empty_file_uses_defaults(self, tmp_path):
        assert AppConfig.load_from_yaml(_write(tmp_path, "")) == AppConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_non_mapping_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- a\n- b\n"))

    def test_invalid_yaml_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "window: [unclosed\n"))

    @pytest.mark.parametrize(
        "window",
        [
            {"start_hour": 24},
            {"end_hour": 0},
            {"end_hour": 25},
            {"start_hour": 10, "end_hour": 9},
            {"timezone": "Mars/Olympus_Mons"},
        ],
    )
    def test_invalid_window_rejected(self, window):
        with pytest.raises(ValueError):
            AppConfig(window=window)

    @pytest.mark.parametrize(
        "search",
        [
            {"step_minutes": 0},
            {"max_candidates": -1},
            {"default_duration_minutes": 0},
            {"min_search_days": 0},
            {"reminder_minutes": -5},
        ],
    )
    def test_invalid_search_rejected(self, search):
        with pytest.raises(ValueError):
            AppConfig(search=search)


class TestLoadConfig:

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path, "calendar_id: team\n")

        assert load_config(path).calendar_id == "team"

    def test_explicit_missing_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_default_location_in_working_directory(self, tmp_path, monkeypatch):
        _write(tmp_path, "calendar_id: from-cwd\n")
        monkeypatch.chdir(tmp_path)

        assert load_config().calendar_id == "from-cwd"
