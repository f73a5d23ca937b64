import json

import pytest

from court_analytics.config import Settings, get_settings, reset_settings
from court_analytics.core import ConfigurationError


def test_defaults_are_valid():
    settings = Settings().validate()
    assert settings.track_thresh == 0.5
    assert settings.track_buffer == 30
    assert settings.match_thresh == 0.8
    assert settings.pixels_to_unit is None
    assert settings.heatmap_grid_size == 10


@pytest.mark.parametrize("overrides", [
    {"track_thresh": 1.5},
    {"match_thresh": 0.0},
    {"track_buffer": -1},
    {"min_hits_to_confirm": 0},
    {"pixels_to_unit": -0.1},
    {"stop_threshold": 3.0, "stop_from_threshold": 2.0},
    {"heatmap_grid_size": 0},
    {"ball_trajectory_memory": 2},
    {"dominant_side": "both"},
])
def test_validate_rejects_out_of_range(overrides):
    with pytest.raises(ConfigurationError):
        Settings(**overrides).validate()


def test_from_file_ignores_unknown_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"track_buffer": 12, "bogus": True}))

    settings = Settings.from_file(str(path))

    assert settings.track_buffer == 12
    assert not hasattr(settings, "bogus")


def test_from_file_validates(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"match_thresh": 2.0}))

    with pytest.raises(ConfigurationError):
        Settings.from_file(str(path))


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    saved = Settings(track_buffer=45, pixels_to_unit=0.02, dominant_side="left")

    saved.save(str(path))

    assert Settings.from_file(str(path)) == saved


def test_from_env(monkeypatch):
    monkeypatch.setenv("COURT_ANALYTICS_TRACK_BUFFER", "60")
    monkeypatch.setenv("COURT_ANALYTICS_MATCH_THRESH", "0.6")
    monkeypatch.setenv("COURT_ANALYTICS_PIXELS_TO_UNIT", "0.015")
    monkeypatch.setenv("COURT_ANALYTICS_DOMINANT_SIDE", "left")

    settings = Settings.from_env()

    assert settings.track_buffer == 60
    assert settings.match_thresh == pytest.approx(0.6)
    assert settings.pixels_to_unit == pytest.approx(0.015)
    assert settings.dominant_side == "left"


def test_from_env_rejects_bad_values(monkeypatch):
    monkeypatch.setenv("COURT_ANALYTICS_TRACK_BUFFER", "thirty")
    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_get_settings_reads_config_file(tmp_path, monkeypatch):
    path = tmp_path / "court_analytics.json"
    path.write_text(json.dumps({"heatmap_grid_size": 20}))
    monkeypatch.setenv("COURT_ANALYTICS_CONFIG", str(path))
    reset_settings()

    settings = get_settings()

    assert settings.heatmap_grid_size == 20
    assert get_settings() is settings


def test_reset_settings_creates_new_instance():
    first = get_settings()
    reset_settings()
    assert get_settings() is not first
