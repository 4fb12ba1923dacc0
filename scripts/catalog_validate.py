from __future__ import annotations

import argparse
from collections import Counter

from pydantic import ValidationError

from metrodeals.catalog.loader import load_businesses, load_offers, load_stations
from metrodeals.cli import radius_arg
from metrodeals.config.settings import get_settings
from metrodeals.core.env import resolve_project_path
from metrodeals.core.station_index import StationIndex
from metrodeals.discovery.registration import check_registration_location


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    p = argparse.ArgumentParser(description="Validate MetroDeals catalogs (offline).")
    p.add_argument("--stations", type=str, default=settings.catalog.stations_path)
    p.add_argument("--businesses", type=str, default=settings.catalog.businesses_path)
    p.add_argument("--offers", type=str, default=settings.catalog.offers_path)
    p.add_argument("--radius", type=radius_arg, default=settings.discovery.registration_radius_m)
    args = p.parse_args(argv)

    try:
        stations = load_stations(args.stations)
        businesses = load_businesses(args.businesses)
        offers = load_offers(args.offers)
    except ValidationError as e:
        print("Invalid catalog record:")
        print(e)
        return 2

    dup_stations = [sid for sid, n in Counter(s.id for s in stations).items() if n > 1]
    if dup_stations:
        print("Duplicate station ids:", ", ".join(sorted(dup_stations)))
        return 2
    index = StationIndex(stations)

    known_businesses = {b.id for b in businesses}
    dup_businesses = [bid for bid, n in Counter(b.id for b in businesses).items() if n > 1]
    orphan_offers = [o.id for o in offers if o.business_id not in known_businesses]

    out_of_range = []
    for b in businesses:
        if not b.active:
            continue
        check = check_registration_location(b.location, index, radius_m=args.radius)
        if not check.eligible:
            out_of_range.append(f"{b.id} ({check.reason})")

    print("Stations:", resolve_project_path(args.stations))
    print("  total:", len(index), "active:", len(index.active_stations))
    print("Businesses:", resolve_project_path(args.businesses))
    print("  total:", len(businesses))
    print("Offers:", resolve_project_path(args.offers))
    print("  total:", len(offers), "active:", sum(1 for o in offers if o.is_active))

    if dup_businesses:
        print("Duplicate business ids:", ", ".join(sorted(dup_businesses)))
    if orphan_offers:
        print("Offers with unknown business:", len(orphan_offers), "example:", ", ".join(orphan_offers[:8]))
    if out_of_range:
        print(f"Active businesses farther than {int(args.radius)}m from any station:", len(out_of_range))
        for row in out_of_range[:8]:
            print("  ", row)

    if dup_businesses or orphan_offers:
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
