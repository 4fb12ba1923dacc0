"""
API routes.

Endpoints:
- GET  `/api/stations`: the station snapshot (inactive stations included, flagged).
- GET  `/api/stations/nearest`: closest active station to a coordinate.
- GET  `/api/businesses`: the filtered business listing (station/radius/search/category).
- GET  `/api/deals`: active deals, optionally narrowed to a station and a brand.
- GET  `/api/deals/by-station`: the "deals per station" table.
- POST `/api/registration/check`: is this location close enough to a station to register?
- GET  `/api/settings`: public discovery/display settings for the UI.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException

from metrodeals.catalog.loader import load_businesses, load_offers, load_stations
from metrodeals.config.settings import get_settings
from metrodeals.core.geo import DistanceLabels, format_distance
from metrodeals.core.station_index import NearestStation, StationIndex
from metrodeals.core.time import Clock, SystemClock
from metrodeals.discovery.deals import DealAggregator
from metrodeals.discovery.proximity import AnnotatedEntity, ProximityFilter
from metrodeals.discovery.registration import check_registration_location
from metrodeals.domain.models import Business, FilterCriteria, GeoPoint, Offer

router = APIRouter()


@lru_cache
def _station_index() -> StationIndex:
    settings = get_settings()
    return StationIndex(load_stations(settings.catalog.stations_path))


@lru_cache
def _businesses() -> list[Business]:
    settings = get_settings()
    return [b for b in load_businesses(settings.catalog.businesses_path) if b.active]


@lru_cache
def _offers() -> list[Offer]:
    settings = get_settings()
    return load_offers(settings.catalog.offers_path)


def _clock() -> Clock:
    return SystemClock()


def _labels() -> DistanceLabels:
    return get_settings().display.distance_labels()


def _nearest_payload(nearest: NearestStation | None, labels: DistanceLabels) -> dict[str, Any] | None:
    if nearest is None:
        return None
    return {
        "station_id": nearest.station_id,
        "name": nearest.name,
        "distance_m": nearest.distance_m,
        "distance_label": format_distance(nearest.distance_m, labels),
    }


def _annotated_payload(item: AnnotatedEntity, index: StationIndex, labels: DistanceLabels) -> dict[str, Any]:
    closest = None
    if item.closest_station_id is not None:
        station = index.get(item.closest_station_id)
        closest = _nearest_payload(
            NearestStation(
                station_id=item.closest_station_id,
                name=station.name if station else item.closest_station_id,
                distance_m=float(item.closest_station_distance_m or 0.0),
            ),
            labels,
        )
    return {
        "item": item.entity.model_dump(mode="json"),
        "distance_m": item.distance_m,
        "distance_label": format_distance(item.distance_m, labels) if item.distance_m is not None else None,
        "closest_station": closest,
    }


@router.get("/api/stations")
def get_stations() -> dict:
    index = _station_index()
    return {"stations": [st.model_dump(mode="json") for st in index]}


@router.get("/api/stations/nearest")
def get_nearest_station(lat: float, lon: float) -> dict:
    """Closest active station; `nearest` is null when no station is active."""
    try:
        point = GeoPoint(lat=lat, lon=lon)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"nearest": _nearest_payload(_station_index().nearest(point), _labels())}


@router.get("/api/businesses")
def get_businesses(
    station: str | None = None,
    radius_m: float | None = None,
    q: str = "",
    category: str | None = None,
) -> dict:
    settings = get_settings()
    try:
        criteria = FilterCriteria(
            reference_station_id=station,
            radius_m=radius_m if radius_m is not None else settings.discovery.default_radius_m,
            search_text=q,
            category_id=category,
        )
    except ValueError as e:
        # Out-of-range radius and similar input errors are client errors.
        raise HTTPException(status_code=400, detail=str(e)) from e

    index = _station_index()
    labels = _labels()
    results = ProximityFilter(index).apply(_businesses(), criteria)
    selected = index.active_station(criteria.reference_station_id) if criteria.reference_station_id else None
    return {
        "criteria": criteria.model_dump(mode="json"),
        "selected_station": selected.model_dump(mode="json") if selected else None,
        "count": len(results),
        "results": [_annotated_payload(r, index, labels) for r in results],
    }


def _aggregator() -> DealAggregator:
    settings = get_settings()
    return DealAggregator(_station_index(), clock=_clock(), timezone=settings.app.timezone)


@router.get("/api/deals")
def get_deals(station: str | None = None, brand: str | None = None) -> dict:
    settings = get_settings()
    radius_m = settings.discovery.station_deals_distance_m
    aggregator = _aggregator()

    live = aggregator.active_unexpired(_offers())
    filtered = aggregator.filter_by_station_and_brand(live, station, brand, radius_m)
    index = _station_index()
    labels = _labels()
    return {
        "radius_m": radius_m,
        "brands": aggregator.available_brands(live),
        "count": len(filtered),
        "deals": [_annotated_payload(a, index, labels) for a in aggregator.annotate(filtered)],
    }


@router.get("/api/deals/by-station")
def get_deals_by_station() -> dict:
    settings = get_settings()
    radius_m = settings.discovery.station_deals_distance_m
    aggregator = _aggregator()
    index = _station_index()
    labels = _labels()

    grouped = aggregator.group_by_station(aggregator.active_unexpired(_offers()), radius_m)
    stations = []
    for station_id, offers in grouped.items():
        station = index.get(station_id)
        stations.append(
            {
                "station_id": station_id,
                "name": station.name if station else station_id,
                "deals": [_annotated_payload(a, index, labels) for a in aggregator.annotate(offers)],
            }
        )
    return {"radius_m": radius_m, "stations": stations}


@router.post("/api/registration/check")
def post_registration_check(location: GeoPoint) -> dict:
    settings = get_settings()
    check = check_registration_location(
        location, _station_index(), radius_m=settings.discovery.registration_radius_m
    )
    labels = _labels()
    return {
        "eligible": check.eligible,
        "reason": check.reason,
        "radius_m": check.radius_m,
        "nearest": _nearest_payload(check.nearest, labels),
        "stations_in_range": [_nearest_payload(n, labels) for n in check.stations_in_range],
    }


@router.get("/api/settings")
def get_public_settings() -> dict:
    settings = get_settings()
    return {
        "app": {"name": settings.app.name, "timezone": settings.app.timezone},
        "discovery": settings.discovery.model_dump(mode="json"),
        "display": settings.display.model_dump(mode="json"),
    }
