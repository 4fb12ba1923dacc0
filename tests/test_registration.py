import pytest

from metrodeals.core.station_index import StationIndex
from metrodeals.discovery.registration import check_registration_location
from metrodeals.domain.models import GeoPoint, Station

STATIONS = [
    Station(id="venizelou", name="Βενιζέλου", location=GeoPoint(lat=40.6363, lon=22.9386)),
    Station(id="agia-sofia", name="Αγία Σοφία", location=GeoPoint(lat=40.6334, lon=22.9415)),
]


def test_location_next_to_a_station_is_eligible():
    check = check_registration_location(GeoPoint(lat=40.6335, lon=22.9414), StationIndex(STATIONS), radius_m=200)

    assert check.eligible
    assert [s.station_id for s in check.stations_in_range] == ["agia-sofia"]
    assert check.nearest.station_id == "agia-sofia"
    assert "Αγία Σοφία" in check.reason


def test_location_far_from_every_station_is_rejected():
    check = check_registration_location(GeoPoint(lat=40.60, lon=22.99), StationIndex(STATIONS), radius_m=200)

    assert not check.eligible
    assert check.stations_in_range == []
    assert check.nearest is not None
    assert check.nearest.distance_m > 200
    assert check.reason.startswith("More than 200m")


def test_larger_radius_admits_more_stations():
    point = GeoPoint(lat=40.63485, lon=22.94005)
    index = StationIndex(STATIONS)

    assert not check_registration_location(point, index, radius_m=50).eligible
    wide = check_registration_location(point, index, radius_m=1000)
    assert {s.station_id for s in wide.stations_in_range} == {"venizelou", "agia-sofia"}


def test_no_active_stations_is_never_eligible():
    inactive = [s.model_copy(update={"active": False}) for s in STATIONS]

    check = check_registration_location(GeoPoint(lat=40.6363, lon=22.9386), StationIndex(inactive), radius_m=1000)

    assert not check.eligible
    assert check.nearest is None
    assert check.reason == "No active metro stations"


@pytest.mark.parametrize("radius", [49.9, 1000.1, -5, 100_000])
def test_out_of_range_radius_is_rejected(radius):
    with pytest.raises(ValueError, match="radius_m"):
        check_registration_location(GeoPoint(lat=40.70, lon=22.99), StationIndex(STATIONS), radius_m=radius)
