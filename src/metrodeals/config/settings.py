# src/metrodeals/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/metrodeals/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `METRODEALS_CONFIG_PATH`
- environment variables (e.g., `METRODEALS_LOG_LEVEL`, `METRODEALS_STATION_DEALS_DISTANCE_M`)

Design rule:
- Radii and display labels live in YAML, not hard-coded in the discovery logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from metrodeals.core.env import load_dotenv_if_present
from metrodeals.core.geo import DistanceLabels
from metrodeals.domain.models import DEFAULT_RADIUS_M, RADIUS_MAX_M, RADIUS_MIN_M


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `metrodeals.config`."""
    text = resources.files("metrodeals.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "MetroDeals"
    timezone: str = "Europe/Athens"
    log_level: str = "INFO"


class CatalogSettings(BaseModel):
    stations_path: str = "data/catalogs/stations.json"
    businesses_path: str = "data/catalogs/businesses.json"
    offers_path: str = "data/catalogs/offers.json"


class DiscoverySettings(BaseModel):
    default_radius_m: float = Field(DEFAULT_RADIUS_M, ge=RADIUS_MIN_M, le=RADIUS_MAX_M)
    station_deals_distance_m: float = Field(DEFAULT_RADIUS_M, ge=RADIUS_MIN_M, le=RADIUS_MAX_M)
    registration_radius_m: float = Field(DEFAULT_RADIUS_M, ge=RADIUS_MIN_M, le=RADIUS_MAX_M)


class DisplaySettings(BaseModel):
    unknown_distance: str = "Άγνωστη απόσταση"
    meters_suffix: str = "μ"
    kilometers_suffix: str = "χλμ"

    def distance_labels(self) -> DistanceLabels:
        return DistanceLabels(
            unknown=self.unknown_distance,
            meters=self.meters_suffix,
            kilometers=self.kilometers_suffix,
        )


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("METRODEALS_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    deals_distance = os.getenv("METRODEALS_STATION_DEALS_DISTANCE_M")
    if deals_distance:
        data.setdefault("discovery", {})["station_deals_distance_m"] = float(deals_distance)

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("METRODEALS_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
