"""
Normalization functions for FleetWatch.

This module contains pure functions for converting store rows and
payload members into geometry domain models. Malformed input raises
GeometryError.
"""

import math
from typing import Any, Dict, List
from .errors import GeometryError
from .models import Coordinate, ExpectedPath, Geofence
from fleetwatch.common.geo import open_ring, validate_coordinates

# Column names seen for the GeoJSON polygon, newest first
POLYGON_KEYS = ("geojson_polygon", "geojson_ploygon", "polygon")


def _to_coordinate(raw: Any) -> Coordinate:
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        raise GeometryError(f"invalid vertex: {raw!r}")
    try:
        lon, lat = float(raw[0]), float(raw[1])
    except (TypeError, ValueError):
        raise GeometryError(f"invalid vertex: {raw!r}")
    if not (math.isfinite(lon) and math.isfinite(lat)) or not validate_coordinates(lat, lon):
        raise GeometryError(f"vertex out of range: {raw!r}")
    return (lon, lat)


def to_ring(coordinates: Any) -> List[Coordinate]:
    """
    Extracts the outer ring from GeoJSON polygon coordinates.

    Accepts either [[ring...], hole...] or a bare ring.

    Raises:
        GeometryError: fewer than three distinct vertices or a bad vertex
    """
    if not isinstance(coordinates, list) or not coordinates:
        raise GeometryError("polygon has no coordinates")

    # [[ [lon, lat], ... ], ...] vs [ [lon, lat], ... ]
    first = coordinates[0]
    if isinstance(first, list) and first and isinstance(first[0], (list, tuple)):
        raw_ring = first
    else:
        raw_ring = coordinates

    ring = open_ring([_to_coordinate(v) for v in raw_ring])
    if len(set(ring)) < 3:
        raise GeometryError("polygon needs at least three distinct vertices")
    return ring


def to_geofence(record: Dict[str, Any]) -> Geofence:
    """
    Builds a Geofence from a geofences table row.

    Args:
        record: row with location_name and a GeoJSON polygon

    Returns:
        Geofence model
    """
    name = record.get("location_name") or record.get("name")
    if not name:
        raise GeometryError("geofence has no location_name")

    geometry = None
    for key in POLYGON_KEYS:
        if record.get(key) is not None:
            geometry = record[key]
            break
    if geometry is None:
        raise GeometryError(f"geofence '{name}' has no polygon")

    if isinstance(geometry, dict):
        if geometry.get("type", "Polygon") != "Polygon":
            raise GeometryError(f"geofence '{name}' is not a Polygon")
        coordinates = geometry.get("coordinates")
    else:
        coordinates = geometry

    geofence_id = record.get("id")
    return Geofence(
        id=str(geofence_id) if geofence_id is not None else None,
        location_name=str(name),
        ring=to_ring(coordinates),
    )


def to_expected_path(raw: Any) -> ExpectedPath:
    """
    Builds an ExpectedPath from a GeoJSON LineString or a list of [lon, lat].

    Raises:
        GeometryError: wrong shape or fewer than two vertices
    """
    if isinstance(raw, dict):
        if raw.get("type", "LineString") != "LineString":
            raise GeometryError("expected path must be a LineString")
        raw = raw.get("coordinates")

    if not isinstance(raw, list) or len(raw) < 2:
        raise GeometryError("expected path needs at least two vertices")

    return ExpectedPath(vertices=[_to_coordinate(v) for v in raw])
