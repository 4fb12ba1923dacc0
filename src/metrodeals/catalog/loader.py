"""
Catalog loader.

Stations, businesses and offers arrive as JSON arrays exported from the remote store
(defaults: `data/catalogs/*.json`). We validate them into typed Pydantic models so the
proximity engine can assume a consistent shape.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from metrodeals.core.env import resolve_project_path
from metrodeals.domain.models import Business, Offer, Station


_STATIONS_ADAPTER = TypeAdapter(list[Station])
_BUSINESSES_ADAPTER = TypeAdapter(list[Business])
_OFFERS_ADAPTER = TypeAdapter(list[Offer])


def _read_json(path: str | Path) -> Any:
    resolved = resolve_project_path(path)
    return json.loads(resolved.read_text(encoding="utf-8"))


def load_stations(path: str | Path) -> list[Station]:
    """Load and validate a station catalog JSON file (file order is kept)."""
    return _STATIONS_ADAPTER.validate_python(_read_json(path))


def load_businesses(path: str | Path) -> list[Business]:
    return _BUSINESSES_ADAPTER.validate_python(_read_json(path))


def load_offers(path: str | Path) -> list[Offer]:
    return _OFFERS_ADAPTER.validate_python(_read_json(path))
