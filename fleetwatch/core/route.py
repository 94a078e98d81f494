"""
Route deviation evaluation for FleetWatch.

Distance from a reading to its expected path is measured on the
sphere, so the threshold holds in meters at any latitude.
"""

import math
from .models import AlertDraft, ExpectedPath, Reading, RouteCheck
from .errors import GeometryError
from fleetwatch.common.geo import point_to_polyline_distance_m
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.route")

ROUTE_DEVIATION_M = 100.0


def evaluate_route_deviation(
    reading: Reading,
    expected_path: ExpectedPath,
    *,
    threshold_m: float = ROUTE_DEVIATION_M
) -> RouteCheck:
    """
    Classifies a reading against its expected path.

    Any failure is logged and reported as not deviated.

    Args:
        reading: validated reading
        expected_path: planned route
        threshold_m: deviation when the distance is strictly above this

    Returns:
        RouteCheck with the classification, the distance and the alert draft
    """
    try:
        if expected_path is None or len(expected_path.vertices) < 2:
            raise GeometryError("expected path needs at least two vertices")

        distance = point_to_polyline_distance_m(reading.point, expected_path.vertices)
        if not math.isfinite(distance):
            raise GeometryError(f"non-finite distance: {distance}")
    except Exception as e:
        log.error(f"Route deviation check failed vehicle:{reading.vehicle_id} error:{e}")
        return RouteCheck(deviated=False)

    if distance <= threshold_m:
        return RouteCheck(deviated=False, distance_m=distance)

    log.info(f"Route deviation vehicle:{reading.vehicle_id} distance_m:{distance:.1f}")
    return RouteCheck(
        deviated=True,
        distance_m=distance,
        alert=AlertDraft(
            vehicle_id=reading.vehicle_id,
            type="route",
            severity="high",
            message="Vehicle deviated from expected route",
        ),
    )
