"""
Geofence evaluation for FleetWatch.

This module implements geofence containment for a reading and the
per-vehicle tracker that turns containment into "entered" transitions.
"""

from typing import Dict, FrozenSet, Iterable, List, Sequence
from .models import Geofence, NotificationDraft, Reading
from fleetwatch.common.geo import calculate_bounding_box, point_in_polygon
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.geofence")

TRANSITION = "transition"
EVERY_READING = "every_reading"
MODES = (TRANSITION, EVERY_READING)


def geofence_contains(geofence: Geofence, reading: Reading) -> bool:
    """True when the reading's (lon, lat) is inside or on the geofence boundary."""
    min_lon, min_lat, max_lon, max_lat = calculate_bounding_box(geofence.ring)
    if not (min_lon <= reading.lon <= max_lon and min_lat <= reading.lat <= max_lat):
        return False
    return point_in_polygon(reading.point, geofence.ring)


def containing_geofences(reading: Reading, geofences: Iterable[Geofence]) -> List[Geofence]:
    """
    Geofences containing the reading, in input order.

    A geofence whose test raises is logged and skipped.
    """
    inside: List[Geofence] = []
    for geofence in geofences:
        try:
            if geofence_contains(geofence, reading):
                inside.append(geofence)
        except Exception as e:
            log.error(f"Geofence containment failed geofence:{geofence.location_name} error:{e}")
    return inside


def entry_message(reading: Reading, geofence: Geofence) -> str:
    return f"Vehicle {reading.vehicle_id} has entered {geofence.location_name}"


def evaluate_geofences(
    reading: Reading,
    geofences: Sequence[Geofence],
    recipients: Sequence[str]
) -> List[NotificationDraft]:
    """
    Builds one notification per (containing geofence, recipient) pair.

    Stateless: every call that finds containment yields notifications.

    Args:
        reading: validated reading
        geofences: geofences to test
        recipients: user ids holding a notify role

    Returns:
        notification drafts
    """
    drafts: List[NotificationDraft] = []
    for geofence in containing_geofences(reading, geofences):
        message = entry_message(reading, geofence)
        for user_id in recipients:
            drafts.append(NotificationDraft(user_id=user_id, message=message))
    return drafts


class GeofenceTracker:
    """In-memory last known containing geofence set per vehicle"""

    def __init__(self, mode: str = TRANSITION):
        """
        Args:
            mode: "transition" notifies only on newly entered geofences,
                "every_reading" notifies on every containing reading
        """
        if mode not in MODES:
            raise ValueError(f"unknown geofence mode: {mode}")
        self.mode = mode
        self._inside: Dict[str, FrozenSet[str]] = {}

    def entering(self, vehicle_id: str, containing: Sequence[Geofence]) -> List[Geofence]:
        """
        Geofences to notify for the current reading. Does not record it.

        Args:
            vehicle_id: vehicle identifier
            containing: geofences containing the current reading

        Returns:
            geofences entered since the last recorded reading (all of them in
            every_reading mode)
        """
        if self.mode == EVERY_READING:
            return list(containing)
        previous = self._inside.get(vehicle_id, frozenset())
        return [g for g in containing if g.key not in previous]

    def record(self, vehicle_id: str, containing: Sequence[Geofence]) -> None:
        """Commits the containing set as the last known state of the vehicle."""
        self._inside[vehicle_id] = frozenset(g.key for g in containing)

    def newly_entered(self, vehicle_id: str, containing: Sequence[Geofence]) -> List[Geofence]:
        """entering() followed by record()."""
        entered = self.entering(vehicle_id, containing)
        self.record(vehicle_id, containing)
        if entered and self.mode == TRANSITION:
            log.debug(f"Geofence transition vehicle:{vehicle_id} entered:{[g.key for g in entered]}")
        return entered

    def inside(self, vehicle_id: str) -> FrozenSet[str]:
        return self._inside.get(vehicle_id, frozenset())

    def forget(self, vehicle_id: str) -> None:
        self._inside.pop(vehicle_id, None)

    def __len__(self) -> int:
        return len(self._inside)
