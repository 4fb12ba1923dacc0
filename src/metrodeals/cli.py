"""
MetroDeals CLI entrypoint.

This CLI is intended for quick local demos and catalog debugging without the web UI.
It reads the configured catalogs and delegates all distance logic to
`metrodeals.discovery` and `metrodeals.core.station_index`.
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from metrodeals.catalog.loader import load_businesses, load_offers, load_stations
from metrodeals.config.settings import Settings, get_settings
from metrodeals.core.geo import format_distance
from metrodeals.core.logging import configure_logging
from metrodeals.core.station_index import StationIndex
from metrodeals.core.time import FixedClock, SystemClock, parse_datetime
from metrodeals.discovery.deals import DealAggregator
from metrodeals.discovery.proximity import ProximityFilter
from metrodeals.discovery.registration import check_registration_location
from metrodeals.domain.models import FilterCriteria, GeoPoint, validate_radius


def _station_index(settings: Settings) -> StationIndex:
    return StationIndex(load_stations(settings.catalog.stations_path))


def radius_arg(value: str) -> float:
    """argparse `type=` for radius flags; out-of-range values become a usage error."""
    try:
        return validate_radius(float(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _dump(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _cmd_stations(args: argparse.Namespace) -> int:
    settings = get_settings()
    index = _station_index(settings)
    if args.json:
        _dump([st.model_dump(mode="json") for st in index])
        return 0
    for st in index:
        flag = "" if st.active else "  (inactive)"
        print(f"{st.id:<22} {st.name}  [{st.status}]{flag}")
    return 0


def _cmd_nearest(args: argparse.Namespace) -> int:
    settings = get_settings()
    labels = settings.display.distance_labels()
    nearest = _station_index(settings).nearest(GeoPoint(lat=args.lat, lon=args.lon))
    if args.json:
        if nearest is None:
            _dump(None)
        else:
            _dump({"station_id": nearest.station_id, "name": nearest.name, "distance_m": nearest.distance_m})
        return 0
    if nearest is None:
        print("No active stations.")
        return 1
    print(f"{nearest.name} ({nearest.station_id}): {format_distance(nearest.distance_m, labels)}")
    return 0


def _cmd_businesses(args: argparse.Namespace) -> int:
    settings = get_settings()
    labels = settings.display.distance_labels()
    index = _station_index(settings)

    criteria = FilterCriteria(
        reference_station_id=args.station,
        radius_m=args.radius if args.radius is not None else settings.discovery.default_radius_m,
        search_text=args.search or "",
        category_id=args.category,
    )
    businesses = [b for b in load_businesses(settings.catalog.businesses_path) if b.active]
    results = ProximityFilter(index).apply(businesses, criteria)

    if args.json:
        _dump(
            [
                {
                    "id": r.id,
                    "name": r.entity.name,
                    "distance_m": r.distance_m,
                    "closest_station_id": r.closest_station_id,
                    "closest_station_distance_m": r.closest_station_distance_m,
                }
                for r in results
            ]
        )
        return 0

    print(f"Businesses ({len(results)}):")
    for r in results:
        closest = index.get(r.closest_station_id) if r.closest_station_id else None
        near = (
            f"closest: {closest.name} ({format_distance(r.closest_station_distance_m, labels)})"
            if closest
            else "closest: -"
        )
        dist = format_distance(r.distance_m, labels) if r.distance_m is not None else ""
        print(f"  {dist:>8}  {r.entity.name}  [{r.entity.category_id}]  {near}")
    return 0


def _cmd_deals(args: argparse.Namespace) -> int:
    settings = get_settings()
    labels = settings.display.distance_labels()
    index = _station_index(settings)
    clock = FixedClock(parse_datetime(args.now, settings.app.timezone)) if args.now else SystemClock()
    aggregator = DealAggregator(index, clock=clock, timezone=settings.app.timezone)

    radius_m = args.radius if args.radius is not None else settings.discovery.station_deals_distance_m
    live = aggregator.active_unexpired(load_offers(settings.catalog.offers_path))
    filtered = aggregator.filter_by_station_and_brand(live, args.station, args.brand, radius_m)
    annotated = aggregator.annotate(filtered)

    if args.json:
        _dump(
            {
                "brands": aggregator.available_brands(live),
                "deals": [
                    {
                        "id": a.id,
                        "brand": a.entity.brand,
                        "title": a.entity.title,
                        "closest_station_id": a.closest_station_id,
                        "distance_m": a.distance_m,
                    }
                    for a in annotated
                ],
            }
        )
        return 0

    print("Brands: " + (", ".join(aggregator.available_brands(live)) or "-"))
    print(f"Deals ({len(annotated)}):")
    for a in annotated:
        o = a.entity
        print(f"  {o.brand:<16} {o.title}  {o.discount_text}  ({format_distance(a.distance_m, labels)})")
    return 0


def _cmd_check_location(args: argparse.Namespace) -> int:
    settings = get_settings()
    radius_m = args.radius if args.radius is not None else settings.discovery.registration_radius_m
    check = check_registration_location(
        GeoPoint(lat=args.lat, lon=args.lon), _station_index(settings), radius_m=radius_m
    )
    if args.json:
        _dump({"eligible": check.eligible, "reason": check.reason, "radius_m": check.radius_m})
    else:
        print(("OK: " if check.eligible else "REJECTED: ") + check.reason)
    return 0 if check.eligible else 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the MetroDeals CLI."""
    parser = argparse.ArgumentParser(prog="metrodeals")
    sub = parser.add_subparsers(dest="command", required=True)

    st = sub.add_parser("stations", help="List the station catalog.")
    st.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    st.set_defaults(func=_cmd_stations)

    near = sub.add_parser("nearest", help="Find the closest active station to a coordinate.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lon", required=True, type=float)
    near.add_argument("--json", action="store_true")
    near.set_defaults(func=_cmd_nearest)

    biz = sub.add_parser("businesses", help="List businesses, optionally near a station.")
    biz.add_argument("--station", type=str, default=None, help="Station id (see `stations`)")
    biz.add_argument("--radius", type=radius_arg, default=None, help="Radius in meters (50..1000)")
    biz.add_argument("--search", type=str, default=None)
    biz.add_argument("--category", type=str, default=None)
    biz.add_argument("--json", action="store_true")
    biz.set_defaults(func=_cmd_businesses)

    deals = sub.add_parser("deals", help="List active deals by closest station and brand.")
    deals.add_argument("--station", type=str, default=None)
    deals.add_argument("--brand", type=str, default=None)
    deals.add_argument("--radius", type=radius_arg, default=None, help="Defaults to station_deals_distance_m")
    deals.add_argument("--now", type=str, default=None, help="ISO datetime to evaluate expiry against")
    deals.add_argument("--json", action="store_true")
    deals.set_defaults(func=_cmd_deals)

    chk = sub.add_parser("check-location", help="Check whether a business location may register.")
    chk.add_argument("--lat", required=True, type=float)
    chk.add_argument("--lon", required=True, type=float)
    chk.add_argument("--radius", type=radius_arg, default=None, help="Defaults to registration_radius_m")
    chk.add_argument("--json", action="store_true")
    chk.set_defaults(func=_cmd_check_location)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m metrodeals.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
