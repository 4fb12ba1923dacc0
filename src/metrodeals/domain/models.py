"""
Domain models (Pydantic).

These types represent the records handed to us by the external store:
- metro stations (`Station`)
- listed businesses (`Business`)
- promotional offers attached to a business (`Offer`)
- the user's filter panel state (`FilterCriteria`)

Validation happens here, at the boundary. The proximity engine in `metrodeals.core`
and `metrodeals.discovery` assumes well-formed values and does not re-check them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from metrodeals.core.geo import GeoPoint as CoreGeoPoint

RADIUS_MIN_M = 50
RADIUS_MAX_M = 1000
DEFAULT_RADIUS_M = 200

StationStatus = Literal["planned", "under_construction", "operational"]
BusinessTier = Literal["next_door", "unicorns", "classics"]


def validate_radius(radius_m: float) -> float:
    """Return `radius_m` as a float, or raise `ValueError` outside [50, 1000] meters."""
    r = float(radius_m)
    if not RADIUS_MIN_M <= r <= RADIUS_MAX_M:
        raise ValueError(f"radius_m must be between {RADIUS_MIN_M} and {RADIUS_MAX_M} meters, got {radius_m}")
    return r


class GeoPoint(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    def to_core(self) -> CoreGeoPoint:
        return CoreGeoPoint(lat=self.lat, lon=self.lon)


class Station(BaseModel):
    """A metro stop. Inactive stations stay addressable by id but never match a radius."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    location: GeoPoint
    active: bool = True
    status: StationStatus = "operational"
    lines: tuple[str, ...] = ()

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> object:
        # The admin tables store `under-construction`.
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value


class LocatedEntity(Protocol):
    """Anything the proximity filter can place on the map."""

    @property
    def id(self) -> str: ...

    @property
    def location(self) -> GeoPoint: ...

    @property
    def category_id(self) -> str | None: ...

    @property
    def search_text(self) -> str: ...


class BusinessHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: str
    open: str = ""
    close: str = ""
    closed: bool = False


class Business(BaseModel):
    """A listed business."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category_id: str
    address: str = ""
    location: GeoPoint
    tier: BusinessTier | None = None
    phone: str | None = None
    website: str | None = None
    photos: tuple[str, ...] = ()
    hours: tuple[BusinessHours, ...] = ()
    active: bool = True

    @field_validator("tier", mode="before")
    @classmethod
    def _normalize_tier(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value

    @property
    def search_text(self) -> str:
        return " ".join([self.name, self.description, self.address]).lower()


class Offer(BaseModel):
    """A time-limited deal. `location` is the owning business's coordinate."""

    model_config = ConfigDict(frozen=True)

    id: str
    business_id: str
    business_name: str = ""
    brand: str = ""
    title: str
    description: str = ""
    discount_text: str = ""
    category_id: str | None = None
    location: GeoPoint
    valid_from: datetime | None = None
    valid_until: datetime
    is_active: bool = True
    image_url: str | None = None

    @property
    def search_text(self) -> str:
        return " ".join([self.brand, self.title, self.description, self.business_name]).lower()


class FilterCriteria(BaseModel):
    """Filter panel state. Build a new value on every change; it is never mutated."""

    model_config = ConfigDict(frozen=True)

    reference_station_id: str | None = None
    radius_m: float = Field(default=DEFAULT_RADIUS_M, ge=RADIUS_MIN_M, le=RADIUS_MAX_M)
    search_text: str = ""
    category_id: str | None = None

    @field_validator("reference_station_id", "category_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        # Select controls post "" for "all".
        if isinstance(value, str) and not value.strip():
            return None
        return value
