"""
Station deals (offer bucketing).

Deals are grouped by the *closest* station of the owning business, not by "any
station within the radius". An offer near two stations only ever shows up under
the nearer one.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from metrodeals.core.station_index import StationIndex
from metrodeals.core.time import Clock, ensure_tz
from metrodeals.discovery.proximity import AnnotatedEntity
from metrodeals.domain.models import Offer, validate_radius

logger = logging.getLogger(__name__)


class DealAggregator:
    def __init__(self, stations: StationIndex, *, clock: Clock, timezone: str = "UTC"):
        self._stations = stations
        self._clock = clock
        self._timezone = timezone

    def active_unexpired(self, offers: Iterable[Offer]) -> list[Offer]:
        """Keep active offers whose `valid_until` is strictly after now."""
        now = ensure_tz(self._clock.now(), self._timezone)
        return [o for o in offers if o.is_active and ensure_tz(o.valid_until, self._timezone) > now]

    def _closest_within(self, offer: Offer, radius_m: float) -> str | None:
        closest = self._stations.nearest(offer.location)
        if closest is None or closest.distance_m > radius_m:
            return None
        return closest.station_id

    def filter_by_station_and_brand(
        self,
        offers: Sequence[Offer],
        reference_station_id: str | None,
        brand_filter: str | None,
        radius_m: float,
    ) -> list[Offer]:
        radius_m = validate_radius(radius_m)
        filtered = list(offers)

        if reference_station_id is not None:
            if self._stations.active_station(reference_station_id) is None:
                logger.debug(
                    "Station '%s' is unknown or inactive; skipping station filter.", reference_station_id
                )
            else:
                filtered = [o for o in filtered if self._closest_within(o, radius_m) == reference_station_id]

        brand = (brand_filter or "").strip().casefold()
        if brand:
            filtered = [o for o in filtered if o.brand.strip().casefold() == brand]

        return filtered

    def available_brands(self, offers: Iterable[Offer]) -> list[str]:
        """Distinct brand names for the brand select, sorted."""
        return sorted({o.brand for o in offers if o.brand})

    def group_by_station(self, offers: Iterable[Offer], radius_m: float) -> dict[str, list[Offer]]:
        """Bucket offers under their closest station; offers out of range are left out."""
        radius_m = validate_radius(radius_m)
        buckets: dict[str, list[Offer]] = {}
        for o in offers:
            station_id = self._closest_within(o, radius_m)
            if station_id is not None:
                buckets.setdefault(station_id, []).append(o)
        return {st.id: buckets[st.id] for st in self._stations if st.id in buckets}

    def group_by_brand(self, offers: Iterable[Offer]) -> dict[str, list[Offer]]:
        buckets: dict[str, list[Offer]] = {}
        for o in offers:
            if o.brand:
                buckets.setdefault(o.brand, []).append(o)
        return dict(sorted(buckets.items()))

    def annotate(self, offers: Iterable[Offer]) -> list[AnnotatedEntity[Offer]]:
        # Deal cards show the distance to the closest station, whatever is selected.
        out: list[AnnotatedEntity[Offer]] = []
        for o in offers:
            closest = self._stations.nearest(o.location)
            d = closest.distance_m if closest else None
            out.append(
                AnnotatedEntity(
                    entity=o,
                    distance_m=d,
                    closest_station_id=closest.station_id if closest else None,
                    closest_station_distance_m=d,
                )
            )
        return out
