import math

import pytest

from glyph.features.location.service import (
    EARTH_RADIUS_M,
    accuracy_description,
    bearing,
    bearing_to_compass,
    distance,
    format_distance,
    is_accuracy_sufficient,
    is_valid_coordinate,
    is_within_radius,
)

NYC = (40.7128, -74.0060)
POINTS = [
    NYC,
    (40.7129, -74.0061),
    (51.5074, -0.1278),
    (-33.8688, 151.2093),
    (0.0, 0.0),
    (89.9, 179.9),
    (-89.9, -179.9),
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_distance_is_symmetric(a, b):
    assert distance(*a, *b) == pytest.approx(distance(*b, *a), abs=1e-6)


@pytest.mark.parametrize("p", POINTS)
def test_distance_to_self_is_zero(p):
    assert distance(*p, *p) == 0


def test_distance_matches_known_values():
    # One degree of latitude on a 6,371 km sphere
    assert distance(0, 0, 1, 0) == pytest.approx(EARTH_RADIUS_M * math.pi / 180, rel=1e-9)
    # London to Sydney is roughly 17,000 km
    assert distance(51.5074, -0.1278, -33.8688, 151.2093) == pytest.approx(16_994_000, rel=0.01)


def test_distance_grows_with_separation():
    steps = [distance(0, 0, 0, lng) for lng in (0.001, 0.01, 0.1, 1, 10, 90)]
    assert steps == sorted(steps)


def test_nearby_scenario_distance():
    meters = distance(*NYC, 40.7129, -74.0061)
    assert 10 < meters < 20


def test_is_within_radius_is_inclusive():
    meters = distance(0, 0, 0, 0.001)
    assert is_within_radius(0, 0, 0, 0.001, meters)
    assert not is_within_radius(0, 0, 0, 0.001, meters - 0.01)


@pytest.mark.parametrize(
    "dest, expected",
    [
        ((1, 0), 0),
        ((0, 1), 90),
        ((-1, 0), 180),
        ((0, -1), 270),
    ],
)
def test_bearing_cardinal_directions(dest, expected):
    assert bearing(0, 0, *dest) == pytest.approx(expected, abs=1e-9)


def test_bearing_is_normalized():
    for a in POINTS:
        for b in POINTS:
            value = bearing(*a, *b)
            assert 0 <= value < 360


@pytest.mark.parametrize(
    "deg, expected",
    [(0, "N"), (45, "NE"), (90, "E"), (180, "S"), (270, "W"), (350, "N"), (202.5, "SSW")],
)
def test_bearing_to_compass(deg, expected):
    assert bearing_to_compass(deg) == expected


@pytest.mark.parametrize(
    "lat, lng, ok",
    [
        (0, 0, True),
        (90, 180, True),
        (-90, -180, True),
        (90.0001, 0, False),
        (0, -180.5, False),
        (None, 0, False),
        ("40.7", "-74.0", False),
        (True, 0, False),
    ],
)
def test_is_valid_coordinate(lat, lng, ok):
    assert is_valid_coordinate(lat, lng) is ok


def test_format_distance():
    assert format_distance(12.4) == "12m"
    assert format_distance(999) == "999m"
    assert format_distance(2460) == "2.5km"
    assert format_distance(37_200) == "37km"


def test_accuracy_helpers():
    assert accuracy_description(3) == "Excellent"
    assert accuracy_description(10) == "Good"
    assert accuracy_description(15) == "Fair"
    assert accuracy_description(50) == "Poor"
    assert accuracy_description(51) == "Very Poor"
    assert is_accuracy_sufficient(10)
    assert not is_accuracy_sufficient(10.5)
    assert is_accuracy_sufficient(25, threshold=30)
