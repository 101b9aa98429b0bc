import math

import pytest

from apps.market.services.geo import (
    InvalidCoordinatesError,
    calculate_distance,
    format_distance,
    validate_coordinates,
)


def test_same_point_is_zero():
    assert calculate_distance(26.85, 80.95, 26.85, 80.95) == 0


def test_distance_is_symmetric():
    a = calculate_distance(26.85, 80.95, 28.61, 77.21)
    b = calculate_distance(28.61, 77.21, 26.85, 80.95)
    assert a == b


def test_known_distance_lucknow_delhi():
    # roughly 420 km great-circle
    assert 400 < calculate_distance(26.8467, 80.9462, 28.6139, 77.2090) < 440


def test_antipodal_points_are_half_circumference():
    assert calculate_distance(0, 0, 0, 180) == pytest.approx(math.pi * 6371.0, abs=0.01)


def test_result_has_two_decimals():
    d = calculate_distance(26.85, 80.95, 26.86, 80.96)
    assert d == round(d, 2)


@pytest.mark.parametrize("args", [
    (91, 0, 0, 0),
    (0, 181, 0, 0),
    (0, 0, -91, 0),
    (float("nan"), 0, 0, 0),
    (float("inf"), 0, 0, 0),
    (True, 0, 0, 0),
    ("26.8", 0, 0, 0),
])
def test_invalid_input_raises(args):
    with pytest.raises(InvalidCoordinatesError):
        calculate_distance(*args)


def test_validate_accepts_normal_pair():
    check = validate_coordinates(26.85, 80.95)
    assert check.is_valid
    assert check.error is None


def test_validate_accepts_numeric_strings():
    assert validate_coordinates("26.85", "80.95").is_valid


@pytest.mark.parametrize("lat,lon,message", [
    (None, 80.0, "Coordinates cannot be null"),
    ("abc", 80.0, "Coordinates must be valid numbers"),
    (float("nan"), 80.0, "Coordinates must be valid numbers"),
    (95, 80.0, "Latitude must be between -90 and 90"),
    (26.0, -190, "Longitude must be between -180 and 180"),
    (0, 0, "Coordinates cannot be (0, 0) - likely default/mock coordinates"),
])
def test_validate_rejects(lat, lon, message):
    check = validate_coordinates(lat, lon)
    assert not check.is_valid
    assert check.error == message


def test_zero_on_one_axis_is_valid():
    assert validate_coordinates(0, 80.0).is_valid
    assert validate_coordinates(26.0, 0).is_valid


def test_format_distance():
    assert format_distance(0.5) == "500 m"
    assert format_distance(0.0) == "0 m"
    assert format_distance(0.0125) == "13 m"
    assert format_distance(1.0) == "1.00 km"
    assert format_distance(12.35) == "12.35 km"
