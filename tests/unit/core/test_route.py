"""
Route deviation evaluation tests.
"""

import math
import pytest
from fleetwatch.core.models import ExpectedPath
from fleetwatch.core.route import evaluate_route_deviation
from fleetwatch.core.validation import validate_reading
from fleetwatch.common.geo import EARTH_RADIUS_M

METERS_PER_DEGREE = EARTH_RADIUS_M * math.pi / 180

EQUATOR_PATH = ExpectedPath(vertices=[(0.0, 0.0), (0.02, 0.0)])


def _reading(lon, lat):
    return validate_reading({
        "vehicle_id": "truck-1", "lat": lat, "lon": lon, "speed": 10,
        "fuel": 50, "temp": 70, "timestamp": "2024-05-01T12:00:00Z",
    })


def test_150_m_off_route_deviates():
    check = evaluate_route_deviation(_reading(0.01, 150 / METERS_PER_DEGREE), EQUATOR_PATH)
    assert check.deviated is True
    assert check.distance_m == pytest.approx(150, abs=0.5)
    assert check.alert.type == "route"
    assert check.alert.severity == "high"
    assert check.alert.message == "Vehicle deviated from expected route"
    assert check.alert.vehicle_id == "truck-1"


def test_50_m_off_route_does_not_deviate():
    check = evaluate_route_deviation(_reading(0.01, -50 / METERS_PER_DEGREE), EQUATOR_PATH)
    assert check.deviated is False
    assert check.alert is None
    assert check.distance_m == pytest.approx(50, abs=0.5)


def test_on_route():
    check = evaluate_route_deviation(_reading(0.005, 0.0), EQUATOR_PATH)
    assert check.deviated is False
    assert check.distance_m == pytest.approx(0, abs=0.01)


def test_distance_is_geodesic_at_high_latitude():
    # One degree of longitude is about half as long at 60 degrees north
    path = ExpectedPath(vertices=[(10.0, 59.99), (10.0, 60.01)])
    lon = 10.0 + 50 / (METERS_PER_DEGREE * math.cos(math.radians(60)))
    check = evaluate_route_deviation(_reading(lon, 60.0), path)
    assert check.distance_m == pytest.approx(50, abs=1)
    assert check.deviated is False

    lon = 10.0 + 150 / (METERS_PER_DEGREE * math.cos(math.radians(60)))
    assert evaluate_route_deviation(_reading(lon, 60.0), path).deviated is True


def test_beyond_path_end_uses_endpoint_distance():
    check = evaluate_route_deviation(_reading(0.02 + 200 / METERS_PER_DEGREE, 0.0), EQUATOR_PATH)
    assert check.deviated is True
    assert check.distance_m == pytest.approx(200, abs=0.5)


def test_multi_segment_path_uses_nearest_segment():
    path = ExpectedPath(vertices=[(0.0, 0.0), (0.01, 0.0), (0.01, 0.01)])
    check = evaluate_route_deviation(_reading(0.01 + 30 / METERS_PER_DEGREE, 0.005), path)
    assert check.deviated is False
    assert check.distance_m == pytest.approx(30, abs=0.5)


def test_custom_threshold():
    check = evaluate_route_deviation(
        _reading(0.01, 50 / METERS_PER_DEGREE), EQUATOR_PATH, threshold_m=25
    )
    assert check.deviated is True


def test_degenerate_path_fails_safe():
    path = ExpectedPath.model_construct(vertices=[(0.0, 0.0)])
    check = evaluate_route_deviation(_reading(1.0, 1.0), path)
    assert check.deviated is False
    assert check.distance_m is None


def test_repeatable():
    reading = _reading(0.01, 150 / METERS_PER_DEGREE)
    assert evaluate_route_deviation(reading, EQUATOR_PATH) == evaluate_route_deviation(reading, EQUATOR_PATH)
