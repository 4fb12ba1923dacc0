import json

import pytest

from metrodeals.cli import main


def _json_out(capsys):
    return json.loads(capsys.readouterr().out)


def test_cli_nearest_station(capsys):
    assert main(["nearest", "--lat", "40.6350", "--lon", "22.9400", "--json"]) == 0
    assert _json_out(capsys)["station_id"] == "venizelou"


def test_cli_businesses_near_station(capsys):
    assert main(["businesses", "--station", "agia-sofia", "--radius", "300", "--json"]) == 0
    rows = _json_out(capsys)

    ids = [r["id"] for r in rows]
    assert "starbucks-agia-sofia" in ids
    assert "pizza-hut-fleming" not in ids
    distances = [r["distance_m"] for r in rows]
    assert distances == sorted(distances)


def test_cli_deals_at_a_fixed_instant(capsys):
    assert main(["deals", "--now", "2026-10-19T12:00:00Z", "--json"]) == 0
    data = _json_out(capsys)

    # deal-4 expired in 2025 and deal-5 is switched off.
    assert data["brands"] == ["McDonalds", "Starbucks", "Zara"]

    assert main(["deals", "--now", "2026-10-19T12:00:00Z", "--station", "sintrivani", "--json"]) == 0
    assert [d["id"] for d in _json_out(capsys)["deals"]] == ["deal-3"]


def test_cli_check_location_exit_codes(capsys):
    assert main(["check-location", "--lat", "40.6365", "--lon", "22.9388"]) == 0
    assert capsys.readouterr().out.startswith("OK: ")

    assert main(["check-location", "--lat", "40.70", "--lon", "22.99"]) == 1
    assert capsys.readouterr().out.startswith("REJECTED: ")


def test_cli_stations_lists_catalog(capsys):
    assert main(["stations", "--json"]) == 0
    stations = _json_out(capsys)
    assert len(stations) == 13
    assert stations[-1]["active"] is False


@pytest.mark.parametrize("command", ["businesses", "deals", "check-location"])
@pytest.mark.parametrize("radius", ["49.9", "1000.1", "-5"])
def test_cli_rejects_out_of_range_radius(capsys, command, radius):
    argv = [command, f"--radius={radius}"]
    if command == "check-location":
        argv += ["--lat", "40.70", "--lon", "22.99"]

    with pytest.raises(SystemExit) as exc:
        main(argv)

    assert exc.value.code == 2
    assert "radius_m must be between 50 and 1000" in capsys.readouterr().err
