"""
Read-only station snapshot with nearest-station lookups.

The index is rebuilt wholesale whenever the station set changes; it is never patched.
Lookups are linear scans, which is plenty for a metro line (tens of stations).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from metrodeals.core.geo import GeoPoint, haversine_m
from metrodeals.domain.models import GeoPoint as DomainGeoPoint
from metrodeals.domain.models import Station

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NearestStation:
    station_id: str
    name: str
    distance_m: float


@dataclass(frozen=True)
class _Entry:
    station: Station
    point: GeoPoint


def _as_core(location: GeoPoint | DomainGeoPoint) -> GeoPoint:
    if isinstance(location, DomainGeoPoint):
        return location.to_core()
    return location


class StationIndex:
    def __init__(self, stations: Iterable[Station]):
        self._entries: list[_Entry] = []
        self._by_id: dict[str, _Entry] = {}

        for st in stations:
            if st.id in self._by_id:
                raise ValueError(f"Duplicate station id '{st.id}' in station snapshot")
            e = _Entry(station=st, point=st.location.to_core())
            self._entries.append(e)
            self._by_id[st.id] = e

        self._active: list[_Entry] = [e for e in self._entries if e.station.active]
        logger.debug("Built station index: %d stations (%d active)", len(self._entries), len(self._active))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Station]:
        return (e.station for e in self._entries)

    @property
    def active_stations(self) -> list[Station]:
        return [e.station for e in self._active]

    def get(self, station_id: str) -> Station | None:
        """Return the station by id, active or not (for display)."""
        e = self._by_id.get(station_id)
        return e.station if e is not None else None

    def active_station(self, station_id: str) -> Station | None:
        e = self._by_id.get(station_id)
        if e is None or not e.station.active:
            return None
        return e.station

    def nearest(self, location: GeoPoint | DomainGeoPoint) -> NearestStation | None:
        """Closest active station, or None when there is none.

        Equidistant stations resolve to the one listed first.
        """
        origin = _as_core(location)
        best: _Entry | None = None
        best_d = 0.0
        for e in self._active:
            d = haversine_m(origin, e.point)
            if best is None or d < best_d:
                best = e
                best_d = d
        if best is None:
            return None
        return NearestStation(station_id=best.station.id, name=best.station.name, distance_m=best_d)

    def within_radius(self, location: GeoPoint | DomainGeoPoint, station_id: str, radius_m: float) -> bool:
        e = self._by_id.get(station_id)
        if e is None or not e.station.active:
            return False
        return haversine_m(_as_core(location), e.point) <= float(radius_m)

    def stations_within(self, location: GeoPoint | DomainGeoPoint, radius_m: float) -> list[NearestStation]:
        """All active stations within `radius_m`, closest first (ties keep index order)."""
        origin = _as_core(location)
        r = float(radius_m)
        out: list[NearestStation] = []
        for e in self._active:
            d = haversine_m(origin, e.point)
            if d <= r:
                out.append(NearestStation(station_id=e.station.id, name=e.station.name, distance_m=d))
        out.sort(key=lambda n: n.distance_m)
        return out
