"""
Threshold alert evaluation for FleetWatch.

Pure function deriving alerts from a reading's scalar fields.
"""

from typing import List
from .models import AlertDraft, Reading

TEMP_HIGH_C = 90.0
FUEL_LOW_PCT = 20.0


def evaluate_thresholds(
    reading: Reading,
    *,
    temp_high_c: float = TEMP_HIGH_C,
    fuel_low_pct: float = FUEL_LOW_PCT
) -> List[AlertDraft]:
    """
    Evaluates temperature and fuel thresholds.

    Both rules are checked on every reading; they are not exclusive.

    Args:
        reading: validated reading
        temp_high_c: alert when temp is strictly above this value
        fuel_low_pct: alert when fuel is strictly below this value

    Returns:
        zero, one or two alert drafts
    """
    drafts: List[AlertDraft] = []

    if reading.temp > temp_high_c:
        drafts.append(AlertDraft(
            vehicle_id=reading.vehicle_id,
            type="temp",
            severity="high",
            message="High engine temperature",
        ))

    if reading.fuel < fuel_low_pct:
        drafts.append(AlertDraft(
            vehicle_id=reading.vehicle_id,
            type="fuel",
            severity="medium",
            message="Low fuel level",
        ))

    return drafts
