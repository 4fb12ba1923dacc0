import math

import pytest

from metrodeals.core.geo import DistanceLabels, GeoPoint, format_distance, haversine_m

VENIZELOU = GeoPoint(lat=40.6363, lon=22.9386)
AGIA_SOFIA = GeoPoint(lat=40.6334, lon=22.9415)
SINTRIVANI = GeoPoint(lat=40.6297, lon=22.9534)


def _reference_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    # atan2 form of the haversine, written independently of the implementation.
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlam = math.radians(b.lon - a.lon)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    return 6371e3 * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


@pytest.mark.parametrize("point", [VENIZELOU, GeoPoint(0.0, 0.0), GeoPoint(-33.9, 151.2), GeoPoint(89.9, -179.9)])
def test_distance_to_self_is_zero(point):
    assert haversine_m(point, point) == 0


def test_distance_is_symmetric():
    ab = haversine_m(VENIZELOU, SINTRIVANI)
    ba = haversine_m(SINTRIVANI, VENIZELOU)
    assert ab == pytest.approx(ba, rel=1e-6)


def test_distance_matches_reference_formula():
    assert haversine_m(VENIZELOU, AGIA_SOFIA) == pytest.approx(_reference_distance_m(VENIZELOU, AGIA_SOFIA), rel=1e-9)


def test_one_degree_of_latitude():
    # 2 * pi * R / 360
    assert haversine_m(GeoPoint(0.0, 0.0), GeoPoint(1.0, 0.0)) == pytest.approx(111_194.93, abs=0.01)


def test_triangle_inequality_on_real_stations():
    ac = haversine_m(VENIZELOU, SINTRIVANI)
    ab = haversine_m(VENIZELOU, AGIA_SOFIA)
    bc = haversine_m(AGIA_SOFIA, SINTRIVANI)
    assert ac <= ab + bc + 1e-6


def test_antipodal_points_do_not_raise():
    d = haversine_m(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
    assert d == pytest.approx(math.pi * 6_371_000, rel=1e-9)


def test_format_unknown_distance_uses_placeholder():
    assert format_distance(None) == "Άγνωστη απόσταση"
    assert format_distance(None, DistanceLabels(unknown="Unknown distance")) == "Unknown distance"


@pytest.mark.parametrize(
    ("meters", "expected"),
    [
        (0, "0μ"),
        (150, "150μ"),
        (149.5, "150μ"),
        (149.4, "149μ"),
        (999, "999μ"),
        (999.4, "999μ"),
        (999.6, "1.0χλμ"),
        (1000, "1.0χλμ"),
        (1234, "1.2χλμ"),
        (1250, "1.3χλμ"),
        (12_345.6, "12.3χλμ"),
    ],
)
def test_format_distance(meters, expected):
    assert format_distance(meters) == expected


def test_format_distance_with_custom_labels():
    labels = DistanceLabels(unknown="?", meters="m", kilometers="km")
    assert format_distance(150, labels) == "150m"
    assert format_distance(1000, labels) == "1.0km"
