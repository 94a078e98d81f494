"""
Geographic utilities for FleetWatch.

This module provides geographic calculations including
great-circle distance, point-in-polygon testing and
point-to-polyline distance. Points are (lon, lat) tuples
in degrees unless a function says otherwise.
"""

import math
from typing import List, Sequence, Tuple

# Mean earth radius (meters)
EARTH_RADIUS_M = 6371008.8

# Tolerance in degrees for "point lies on an edge"
_EDGE_EPSILON = 1e-12

Point = Tuple[float, float]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in kilometers.

    Args:
        lat1: latitude of the first point
        lon1: longitude of the first point
        lat2: latitude of the second point
        lon2: longitude of the second point

    Returns:
        distance in kilometers
    """
    return _angular_distance((lon1, lat1), (lon2, lat2)) * EARTH_RADIUS_M / 1000.0


def haversine_m(a: Point, b: Point) -> float:
    """Great-circle distance in meters between two (lon, lat) points."""
    return _angular_distance(a, b) * EARTH_RADIUS_M


def _angular_distance(a: Point, b: Point) -> float:
    lon1, lat1 = math.radians(a[0]), math.radians(a[1])
    lon2, lat2 = math.radians(b[0]), math.radians(b[1])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2)
    return 2 * math.asin(min(1.0, math.sqrt(h)))


def _initial_bearing(a: Point, b: Point) -> float:
    lon1, lat1 = math.radians(a[0]), math.radians(a[1])
    lon2, lat2 = math.radians(b[0]), math.radians(b[1])
    dlon = lon2 - lon1
    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return math.atan2(y, x)


def point_on_segment(point: Point, a: Point, b: Point) -> bool:
    """True when point lies on the planar segment a-b (lon/lat degrees)."""
    x, y = point
    ax, ay = a
    bx, by = b
    cross = (bx - ax) * (y - ay) - (by - ay) * (x - ax)
    scale = max(abs(bx - ax), abs(by - ay), 1.0)
    if abs(cross) > _EDGE_EPSILON * scale:
        return False
    return (min(ax, bx) - _EDGE_EPSILON <= x <= max(ax, bx) + _EDGE_EPSILON and
            min(ay, by) - _EDGE_EPSILON <= y <= max(ay, by) + _EDGE_EPSILON)


def open_ring(polygon: Sequence[Point]) -> List[Point]:
    """Drops the closing vertex of a ring when it repeats the first one."""
    ring = [(float(p[0]), float(p[1])) for p in polygon]
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    return ring


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """
    Ray casting containment test.

    Points exactly on an edge or a vertex are inside. Only the
    outer ring is considered; holes are not supported.

    Args:
        point: point to test (lon, lat)
        polygon: ring vertices [(lon, lat), ...], closed or open

    Returns:
        True when the point is inside or on the boundary
    """
    ring = open_ring(polygon)
    n = len(ring)
    if n < 3:
        return False

    x, y = point

    for i in range(n):
        if point_on_segment(point, ring[i], ring[(i + 1) % n]):
            return True

    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if (yi > y) != (yj > y):
            xinters = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < xinters:
                inside = not inside
        j = i

    return inside


def calculate_bounding_box(polygon: Sequence[Point]) -> Tuple[float, float, float, float]:
    """
    Bounding box of a ring.

    Returns:
        (min_lon, min_lat, max_lon, max_lat)
    """
    if not polygon:
        return (0, 0, 0, 0)

    lons = [p[0] for p in polygon]
    lats = [p[1] for p in polygon]

    return (min(lons), min(lats), max(lons), max(lats))


def point_to_segment_distance_m(point: Point, a: Point, b: Point) -> float:
    """
    Shortest great-circle distance in meters from a point to segment a-b.

    Uses cross-track distance when the projection of the point falls
    inside the segment and the distance to the nearest endpoint otherwise.
    """
    d12 = _angular_distance(a, b)
    d13 = _angular_distance(a, point)
    if d12 == 0.0 or d13 == 0.0:
        return d13 * EARTH_RADIUS_M

    theta12 = _initial_bearing(a, b)
    theta13 = _initial_bearing(a, point)
    delta = theta13 - theta12

    # Behind the start point
    if math.cos(delta) < 0:
        return d13 * EARTH_RADIUS_M

    xt = math.asin(max(-1.0, min(1.0, math.sin(d13) * math.sin(delta))))
    cos_at = math.cos(d13) / max(math.cos(xt), 1e-15)
    at = math.acos(max(-1.0, min(1.0, cos_at)))

    # Past the end point
    if at > d12:
        return haversine_m(b, point)

    return abs(xt) * EARTH_RADIUS_M


def point_to_polyline_distance_m(point: Point, vertices: Sequence[Point]) -> float:
    """
    Minimum distance in meters from a point to a polyline.

    Args:
        point: (lon, lat)
        vertices: ordered polyline vertices, at least two

    Returns:
        distance in meters

    Raises:
        ValueError: fewer than two vertices
    """
    if len(vertices) < 2:
        raise ValueError("polyline needs at least two vertices")

    return min(
        point_to_segment_distance_m(point, vertices[i], vertices[i + 1])
        for i in range(len(vertices) - 1)
    )


def validate_coordinates(lat: float, lon: float) -> bool:
    """True when lat is within [-90, 90] and lon within [-180, 180]."""
    return -90 <= lat <= 90 and -180 <= lon <= 180
