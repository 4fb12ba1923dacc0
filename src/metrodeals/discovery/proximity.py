"""
Proximity filter (listing layer).

One shared implementation of the "businesses near station X" logic used by the
listing, the map markers and the business cards:
- text + category filters,
- optional radius filter around a selected station (sorted closest first),
- a closest-station annotation on every result, independent of the selected station.

Views consume `AnnotatedEntity` values and never recompute distances themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from metrodeals.core.geo import haversine_m
from metrodeals.core.station_index import StationIndex
from metrodeals.domain.models import FilterCriteria, LocatedEntity

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=LocatedEntity)


@dataclass(frozen=True)
class AnnotatedEntity(Generic[T]):
    # `distance_m` is relative to the selected station; None when no station is in effect.
    entity: T
    distance_m: float | None
    closest_station_id: str | None
    closest_station_distance_m: float | None

    @property
    def id(self) -> str:
        return self.entity.id


class ProximityFilter:
    def __init__(self, stations: StationIndex):
        self._stations = stations

    def apply(self, entities: Sequence[T], criteria: FilterCriteria) -> list[AnnotatedEntity[T]]:
        """Filter, sort and annotate `entities` according to `criteria`."""
        candidates = list(entities)

        query = criteria.search_text.strip().lower()
        if query:
            candidates = [e for e in candidates if query in e.search_text]

        if criteria.category_id is not None:
            candidates = [e for e in candidates if e.category_id == criteria.category_id]

        distances: list[float | None] = [None] * len(candidates)
        reference = None
        if criteria.reference_station_id is not None:
            reference = self._stations.active_station(criteria.reference_station_id)
            if reference is None:
                logger.debug(
                    "Station '%s' is unknown or inactive; skipping radius filter.",
                    criteria.reference_station_id,
                )

        if reference is not None:
            origin = reference.location.to_core()
            measured = [(e, haversine_m(e.location.to_core(), origin)) for e in candidates]
            kept = [(e, d) for e, d in measured if d <= criteria.radius_m]
            # `sorted` is stable, so equal distances keep their input order.
            kept = sorted(kept, key=lambda pair: pair[1])
            candidates = [e for e, _ in kept]
            distances = [d for _, d in kept]

        out: list[AnnotatedEntity[T]] = []
        for entity, distance in zip(candidates, distances):
            closest = self._stations.nearest(entity.location)
            out.append(
                AnnotatedEntity(
                    entity=entity,
                    distance_m=distance,
                    closest_station_id=closest.station_id if closest else None,
                    closest_station_distance_m=closest.distance_m if closest else None,
                )
            )
        return out
