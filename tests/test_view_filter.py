import pytest

from suburbview.core.geo import GeoPoint, haversine_km, horizon_distance_km
from suburbview.domain.models import Area, Coordinate, ObservationSnapshot
from suburbview.view.filter import (
    compute_view,
    direction_text,
    horizon_percent,
    in_field_of_view,
    relative_bearing,
)


def _area(name: str, lat: float, lon: float) -> Area:
    return Area(name=name, location=Coordinate(lat=lat, lon=lon))


def _observer(heading: float | None = 0.0, lat: float = 0.0, lon: float = 0.0) -> ObservationSnapshot:
    return ObservationSnapshot(position=Coordinate(lat=lat, lon=lon), heading=heading)


def test_end_to_end_scenario_keeps_only_area_ahead():
    catalog = [
        _area("East", 0, 0.01),
        _area("West", 0, -0.01),
        _area("North", 0.01, 0),
    ]
    results = compute_view(_observer(heading=90.0), catalog)

    assert [r.area.name for r in results] == ["East"]
    east = results[0]
    assert east.bearing_deg == pytest.approx(90.0)
    assert east.relative_bearing_deg == pytest.approx(0.0)
    assert east.direction == "E"
    assert east.distance_km == pytest.approx(1.11, abs=0.01)


def test_unset_position_or_heading_yields_empty_view():
    catalog = [_area("Ahead", 0.01, 0)]
    assert compute_view(ObservationSnapshot(), catalog) == []
    assert compute_view(ObservationSnapshot(heading=0.0), catalog) == []
    assert compute_view(ObservationSnapshot(position=Coordinate(lat=0, lon=0)), catalog) == []


@pytest.mark.parametrize(
    "bearing,heading,expected",
    [
        (44.0, 0.0, True),
        (46.0, 0.0, False),
        (45.0, 0.0, False),
        (316.0, 0.0, True),
        (315.0, 0.0, False),
        (10.0, 350.0, True),
        (350.0, 10.0, True),
        (180.0, 0.0, False),
    ],
)
def test_cone_is_ninety_degrees_wide_with_strict_edges(bearing, heading, expected):
    assert in_field_of_view(relative_bearing(bearing, heading)) is expected


def test_relative_bearing_range():
    assert relative_bearing(90, 90) == 0
    assert relative_bearing(0, 90) == -90
    assert relative_bearing(270, 90) == 180
    assert relative_bearing(10, 350) == pytest.approx(20)
    assert relative_bearing(350, 10) == pytest.approx(-20)


def test_view_filter_uses_cone_against_real_geometry():
    # Points ~1 km away at 44 and 46 degrees from north.
    inside = _area("Inside", 0.0064693, 0.0062473)
    outside = _area("Outside", 0.0062473, 0.0064693)
    results = compute_view(_observer(heading=0.0), [outside, inside])
    assert [r.area.name for r in results] == ["Inside"]


def test_results_are_sorted_by_distance_and_filtering_keeps_order():
    catalog = [
        _area("Far", 0.03, 0.0),
        _area("Behind", -0.005, 0.0),
        _area("Near", 0.01, 0.0),
        _area("Mid", 0.02, 0.001),
    ]
    results = compute_view(_observer(heading=0.0), catalog)
    assert [r.area.name for r in results] == ["Near", "Mid", "Far"]
    distances = [r.distance_km for r in results]
    assert distances == sorted(distances)


def test_equal_distances_keep_catalog_order():
    catalog = [
        _area("Second", 0.01, 0.0),
        _area("First", 0.01, 0.0),
        _area("Duplicate", 0.01, 0.0),
    ]
    results = compute_view(_observer(heading=0.0), catalog)
    assert [r.area.name for r in results] == ["Second", "First", "Duplicate"]


def test_duplicate_names_at_distinct_locations_are_both_kept():
    catalog = [_area("Springfield", 0.01, 0.0), _area("Springfield", 0.02, 0.0)]
    results = compute_view(_observer(heading=0.0), catalog)
    assert [r.area.location.lat for r in results] == [0.01, 0.02]


def test_horizon_percent_is_capped_and_rounded():
    horizon = horizon_distance_km()
    assert horizon_percent(0.0, horizon) == 0.0
    assert horizon_percent(horizon / 2, horizon) == 50.0
    assert horizon_percent(horizon * 3, horizon) == 100.0
    assert horizon_percent(1.0, 4.0) == 25.0
    assert horizon_percent(1.0, 3.0) == 33.3


def test_horizon_percent_in_results():
    near = _area("Near", 0.01, 0.0)
    far = _area("Far", 0.2, 0.0)
    results = compute_view(_observer(heading=0.0), [far, near])
    expected = round(haversine_km(GeoPoint(0, 0), GeoPoint(0.01, 0)) / horizon_distance_km() * 100, 1)
    assert results[0].horizon_percent == expected
    assert results[1].horizon_percent == 100.0


def test_observer_standing_on_an_area():
    # Zero distance: bearing is reported as north, so it is in view when facing north.
    here = _area("Here", 0.0, 0.0)
    results = compute_view(_observer(heading=0.0), [here])
    assert len(results) == 1
    assert results[0].distance_km == 0
    assert results[0].bearing_deg == 0
    assert compute_view(_observer(heading=180.0), [here]) == []


def test_each_call_returns_a_fresh_list():
    catalog = [_area("Ahead", 0.01, 0)]
    observer = _observer(heading=0.0)
    first = compute_view(observer, catalog)
    second = compute_view(observer, catalog)
    assert first == second
    assert first is not second


@pytest.mark.parametrize(
    "bearing,label",
    [
        (0, "N"),
        (90, "E"),
        (180, "S"),
        (270, "W"),
        (22.4, "N"),
        (22.5, "NE"),
        (44, "NE"),
        (67.5, "E"),
        (337.4, "NW"),
        (337.5, "N"),
        (359.9, "N"),
    ],
)
def test_direction_text(bearing, label):
    assert direction_text(bearing) == label
