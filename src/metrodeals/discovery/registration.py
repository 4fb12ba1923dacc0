"""
Registration eligibility.

A business may only sign up if it sits within the configured radius of at least one
active metro station. The registration form calls this before saving a location.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from metrodeals.core.geo import GeoPoint
from metrodeals.core.station_index import NearestStation, StationIndex
from metrodeals.domain.models import GeoPoint as DomainGeoPoint
from metrodeals.domain.models import validate_radius


@dataclass(frozen=True)
class RegistrationCheck:
    eligible: bool
    radius_m: float
    nearest: NearestStation | None
    stations_in_range: list[NearestStation] = field(default_factory=list)

    @property
    def reason(self) -> str:
        if self.eligible:
            return f"Within {int(self.radius_m)}m of {self.stations_in_range[0].name}"
        if self.nearest is None:
            return "No active metro stations"
        return f"More than {int(self.radius_m)}m from the nearest station ({self.nearest.name})"


def check_registration_location(
    location: GeoPoint | DomainGeoPoint, stations: StationIndex, *, radius_m: float
) -> RegistrationCheck:
    radius_m = validate_radius(radius_m)
    in_range = stations.stations_within(location, radius_m)
    return RegistrationCheck(
        eligible=bool(in_range),
        radius_m=radius_m,
        nearest=in_range[0] if in_range else stations.nearest(location),
        stations_in_range=in_range,
    )
