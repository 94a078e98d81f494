"""
Geometry normalization tests.
"""

import pytest
from fleetwatch.core.errors import GeometryError
from fleetwatch.core.normalize import to_expected_path, to_geofence, to_ring


class TestGeofence:

    def test_geojson_polygon(self):
        geofence = to_geofence({
            "id": 7,
            "location_name": "Depot",
            "geojson_polygon": {"type": "Polygon", "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]]},
        })
        assert geofence.id == "7"
        assert geofence.location_name == "Depot"
        assert geofence.ring == [(0, 0), (10, 0), (10, 10), (0, 10)]

    def test_legacy_column_name(self):
        geofence = to_geofence({
            "location_name": "Depot",
            "geojson_ploygon": {"coordinates": [[[0, 0], [1, 0], [1, 1]]]},
        })
        assert len(geofence.ring) == 3
        assert geofence.key == "Depot"

    def test_holes_are_ignored(self):
        geofence = to_geofence({
            "location_name": "Ring",
            "polygon": [[[0, 0], [10, 0], [10, 10], [0, 10]], [[4, 4], [6, 4], [6, 6]]],
        })
        assert geofence.ring == [(0, 0), (10, 0), (10, 10), (0, 10)]

    @pytest.mark.parametrize("record", [
        {"location_name": "Depot"},
        {"geojson_polygon": {"coordinates": [[[0, 0], [1, 0], [1, 1]]]}},
        {"location_name": "Depot", "geojson_polygon": {"type": "Point", "coordinates": [0, 0]}},
        {"location_name": "Depot", "geojson_polygon": {"coordinates": []}},
        {"location_name": "Depot", "geojson_polygon": {"coordinates": [[[0, 0], [1, 0], [0, 0]]]}},
        {"location_name": "Depot", "geojson_polygon": {"coordinates": [[[0, 0], [1, "x"], [1, 1]]]}},
        {"location_name": "Depot", "geojson_polygon": {"coordinates": [[[0, 0], [200, 0], [1, 1]]]}},
    ])
    def test_malformed(self, record):
        with pytest.raises(GeometryError):
            to_geofence(record)


class TestRing:

    def test_bare_ring(self):
        assert to_ring([[0, 0], [1, 0], [1, 1]]) == [(0, 0), (1, 0), (1, 1)]


class TestExpectedPath:

    def test_linestring(self):
        path = to_expected_path({"type": "LineString", "coordinates": [[0, 0], [1, 1]]})
        assert path.vertices == [(0, 0), (1, 1)]

    def test_bare_list(self):
        path = to_expected_path([[0, 0], [1, 1], [2, 2]])
        assert len(path.vertices) == 3

    @pytest.mark.parametrize("raw", [
        [],
        [[0, 0]],
        {"type": "Polygon", "coordinates": [[0, 0], [1, 1]]},
        {"type": "LineString"},
        "0,0;1,1",
        [[0, 0], [None, 1]],
    ])
    def test_malformed(self, raw):
        with pytest.raises(GeometryError):
            to_expected_path(raw)
