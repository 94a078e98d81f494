"""
Geofence evaluation tests.
"""

import pytest
from hypothesis import given, strategies as st
from fleetwatch.core.geofence import (
    EVERY_READING, TRANSITION, GeofenceTracker, containing_geofences, evaluate_geofences
)
from fleetwatch.core.models import Geofence
from fleetwatch.core.validation import validate_reading

SQUARE = Geofence(id="g1", location_name="Depot", ring=[(0, 0), (10, 0), (10, 10), (0, 10)])
YARD = Geofence(id="g2", location_name="Yard", ring=[(4, 4), (6, 4), (6, 6), (4, 6)])
FAR = Geofence(id="g3", location_name="Far away", ring=[(50, 50), (60, 50), (60, 60)])


def _reading(lon, lat, vehicle_id="truck-1"):
    return validate_reading({
        "vehicle_id": vehicle_id, "lat": lat, "lon": lon, "speed": 10,
        "fuel": 50, "temp": 70, "timestamp": "2024-05-01T12:00:00Z",
    })


class TestContainment:
    """Point in polygon on readings"""

    def test_point_inside_square(self):
        assert containing_geofences(_reading(5, 5), [SQUARE]) == [SQUARE]

    def test_point_outside_square(self):
        assert containing_geofences(_reading(20, 20), [SQUARE]) == []

    @pytest.mark.parametrize("lon,lat", [(10, 5), (0, 5), (5, 0), (5, 10), (0, 0), (10, 10)])
    def test_boundary_counts_as_inside(self, lon, lat):
        assert containing_geofences(_reading(lon, lat), [SQUARE]) == [SQUARE]

    def test_nested_geofences(self):
        assert containing_geofences(_reading(5, 5), [SQUARE, YARD, FAR]) == [SQUARE, YARD]


class TestEvaluateGeofences:
    """Notification drafts"""

    def test_one_notification_per_user(self):
        drafts = evaluate_geofences(_reading(5, 5), [SQUARE], ["admin-1", "dispatch-1"])
        assert [d.user_id for d in drafts] == ["admin-1", "dispatch-1"]
        for draft in drafts:
            assert draft.type == "geofence"
            assert draft.read is False
            assert draft.message == "Vehicle truck-1 has entered Depot"

    def test_one_notification_per_user_per_geofence(self):
        drafts = evaluate_geofences(_reading(5, 5), [SQUARE, YARD], ["u1", "u2", "u3"])
        assert len(drafts) == 6
        assert {d.message for d in drafts} == {
            "Vehicle truck-1 has entered Depot",
            "Vehicle truck-1 has entered Yard",
        }

    def test_outside_yields_nothing(self):
        assert evaluate_geofences(_reading(20, 20), [SQUARE], ["u1"]) == []

    def test_no_recipients(self):
        assert evaluate_geofences(_reading(5, 5), [SQUARE], []) == []

    def test_stateless_repeat(self):
        reading = _reading(5, 5)
        assert evaluate_geofences(reading, [SQUARE], ["u1"]) == evaluate_geofences(reading, [SQUARE], ["u1"])


class TestTracker:
    """Entered transitions per vehicle"""

    def test_first_containment_is_an_entry(self):
        tracker = GeofenceTracker()
        assert tracker.newly_entered("truck-1", [SQUARE]) == [SQUARE]

    def test_staying_inside_is_not_an_entry(self):
        tracker = GeofenceTracker(TRANSITION)
        tracker.newly_entered("truck-1", [SQUARE])
        assert tracker.newly_entered("truck-1", [SQUARE]) == []

    def test_leaving_and_reentering(self):
        tracker = GeofenceTracker()
        tracker.newly_entered("truck-1", [SQUARE])
        tracker.newly_entered("truck-1", [])
        assert tracker.newly_entered("truck-1", [SQUARE]) == [SQUARE]

    def test_entering_a_second_geofence(self):
        tracker = GeofenceTracker()
        tracker.newly_entered("truck-1", [SQUARE])
        assert tracker.newly_entered("truck-1", [SQUARE, YARD]) == [YARD]
        assert tracker.inside("truck-1") == frozenset({"g1", "g2"})

    def test_vehicles_are_independent(self):
        tracker = GeofenceTracker()
        tracker.newly_entered("truck-1", [SQUARE])
        assert tracker.newly_entered("truck-2", [SQUARE]) == [SQUARE]
        assert len(tracker) == 2

    def test_every_reading_mode(self):
        tracker = GeofenceTracker(EVERY_READING)
        tracker.newly_entered("truck-1", [SQUARE])
        assert tracker.newly_entered("truck-1", [SQUARE]) == [SQUARE]

    def test_entering_does_not_record(self):
        tracker = GeofenceTracker()
        assert tracker.entering("truck-1", [SQUARE]) == [SQUARE]
        assert tracker.entering("truck-1", [SQUARE]) == [SQUARE]
        assert tracker.inside("truck-1") == frozenset()

        tracker.record("truck-1", [SQUARE])
        assert tracker.entering("truck-1", [SQUARE]) == []

    def test_forget(self):
        tracker = GeofenceTracker()
        tracker.newly_entered("truck-1", [SQUARE])
        tracker.forget("truck-1")
        assert tracker.newly_entered("truck-1", [SQUARE]) == [SQUARE]

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            GeofenceTracker("sometimes")

    def test_geofence_without_id_is_keyed_by_name(self):
        unnamed = Geofence(location_name="Depot", ring=SQUARE.ring)
        tracker = GeofenceTracker()
        tracker.newly_entered("truck-1", [unnamed])
        assert tracker.inside("truck-1") == frozenset({"Depot"})


@given(lon=st.floats(min_value=0.001, max_value=9.999), lat=st.floats(min_value=0.001, max_value=9.999))
def test_interior_points_are_contained(lon, lat):
    assert containing_geofences(_reading(lon, lat), [SQUARE]) == [SQUARE]


@given(lon=st.floats(min_value=10.001, max_value=180), lat=st.floats(min_value=-90, max_value=90))
def test_points_east_of_square_are_not_contained(lon, lat):
    assert containing_geofences(_reading(lon, lat), [SQUARE]) == []
