"""
Geofence registration for FleetWatch.

Polygons are validated before they are stored so that evaluation
does not meet malformed rows written through this service.
"""

from typing import Any, Dict
from fleetwatch.core.errors import GeometryError, ValidationError
from fleetwatch.core.normalize import to_geofence
from fleetwatch.ports.store import GEOFENCES, StorePort
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.geofences")


async def register_geofence(store: StorePort, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validates and stores a geofence.

    Args:
        store: durable store
        payload: {"location_name", "geojson_polygon": {"type": "Polygon", "coordinates": [...]}}

    Returns:
        the stored row

    Raises:
        ValidationError: name or polygon invalid
    """
    if not isinstance(payload, dict):
        raise ValidationError("Geofence payload must be a JSON object")

    try:
        geofence = to_geofence(payload)
    except GeometryError as e:
        raise ValidationError(f"Invalid geofence: {e}")

    ring = [list(v) for v in geofence.ring]
    row = await store.insert(GEOFENCES, {
        "location_name": geofence.location_name,
        "geojson_polygon": {"type": "Polygon", "coordinates": [ring + [ring[0]]]},
    })
    log.info(f"Geofence registered name:{geofence.location_name} vertices:{len(ring)}")
    return row
