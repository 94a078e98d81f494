"""
Maintenance log recording for FleetWatch.

Technician-only operation outside the evaluation core.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fleetwatch.core.errors import ValidationError
from fleetwatch.ports.store import MAINTENANCE_LOGS, StorePort
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.maintenance")


async def record_maintenance(store: StorePort, payload: Dict[str, Any], performed_by: str,
                             now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Stores a maintenance log entry.

    Args:
        store: durable store
        payload: {"vehicle_id", "description", optional "performed_at"}
        performed_by: technician user id

    Returns:
        the stored row

    Raises:
        ValidationError: vehicle_id or description missing
    """
    if not isinstance(payload, dict):
        raise ValidationError("Maintenance payload must be a JSON object")

    vehicle_id = str(payload.get("vehicle_id") or "").strip()
    description = str(payload.get("description") or "").strip()
    if not vehicle_id or not description:
        raise ValidationError("Missing required fields")

    performed_at = payload.get("performed_at") or (now or datetime.now(timezone.utc)).isoformat()
    row = await store.insert(MAINTENANCE_LOGS, {
        "vehicle_id": vehicle_id,
        "description": description,
        "performed_by": performed_by,
        "performed_at": str(performed_at),
    })
    log.info(f"Maintenance logged vehicle:{vehicle_id} by:{performed_by}")
    return row
