"""
Geospatial helpers.

Every view that shows "how far is this from the metro" goes through this module:
- `haversine_m`: straight-line (great-circle) distance between two points
- `format_distance`: the short label shown on business cards, map popups and deal tables

We only ever compute straight-line distance; there is no routing here.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from math import asin, cos, radians, sin, sqrt

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points."""
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Float noise can push `h` just past 1.0 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_M * asin(sqrt(h))


@dataclass(frozen=True)
class DistanceLabels:
    """Localized strings used when rendering a distance."""

    unknown: str = "Άγνωστη απόσταση"
    meters: str = "μ"
    kilometers: str = "χλμ"


DEFAULT_LABELS = DistanceLabels()


def _round_half_away(value: float, exponent: str) -> Decimal:
    d = Decimal(repr(float(value)))
    if d < 0:
        return -((-d).quantize(Decimal(exponent), rounding=ROUND_HALF_UP))
    return d.quantize(Decimal(exponent), rounding=ROUND_HALF_UP)


def format_distance(meters: float | None, labels: DistanceLabels = DEFAULT_LABELS) -> str:
    """Render a distance as `150μ` / `1.2χλμ` (or the configured labels).

    Notes:
    - Meters are rounded half away from zero *before* the 1000 m threshold is checked,
      so 999.6 renders in kilometers.
    - Kilometers always carry exactly one decimal place.
    """
    if meters is None:
        return labels.unknown

    whole_m = _round_half_away(meters, "1")
    if whole_m < 1000:
        return f"{int(whole_m)}{labels.meters}"

    km = _round_half_away(float(meters) / 1000, "0.1")
    return f"{km:.1f}{labels.kilometers}"
