from __future__ import annotations

import pytest
from pydantic import ValidationError

from metrodeals.config.settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    # `get_settings` is cached; every test starts (and ends) from a clean cache.
    monkeypatch.delenv("METRODEALS_CONFIG_PATH", raising=False)
    monkeypatch.delenv("METRODEALS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("METRODEALS_STATION_DEALS_DISTANCE_M", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_packaged_defaults():
    settings = get_settings()

    assert settings.app.timezone == "Europe/Athens"
    assert settings.discovery.default_radius_m == 200
    assert settings.discovery.station_deals_distance_m == 200
    assert settings.discovery.registration_radius_m == 200
    assert settings.display.distance_labels().meters == "μ"


def test_env_overrides_are_applied(monkeypatch):
    monkeypatch.setenv("METRODEALS_LOG_LEVEL", "debug")
    monkeypatch.setenv("METRODEALS_STATION_DEALS_DISTANCE_M", "350")

    settings = get_settings()

    assert settings.app.log_level == "debug"
    assert settings.discovery.station_deals_distance_m == 350


def test_external_config_file(monkeypatch, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "discovery:\n  default_radius_m: 500\ndisplay:\n  meters_suffix: m\n  kilometers_suffix: km\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("METRODEALS_CONFIG_PATH", str(path))

    settings = get_settings()

    assert settings.discovery.default_radius_m == 500
    assert settings.display.distance_labels().kilometers == "km"
    # Sections missing from the file fall back to model defaults.
    assert settings.app.name == "MetroDeals"


def test_out_of_range_radius_in_config_is_rejected(monkeypatch):
    monkeypatch.setenv("METRODEALS_STATION_DEALS_DISTANCE_M", "1500")

    with pytest.raises(ValidationError):
        get_settings()


def test_non_mapping_yaml_root_is_rejected(monkeypatch, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("METRODEALS_CONFIG_PATH", str(path))

    with pytest.raises(ValueError, match="expected a mapping"):
        get_settings()
