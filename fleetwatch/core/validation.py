"""
Reading validation for FleetWatch.

Pure checks applied to a raw telemetry payload before anything
is stored or evaluated. The first failing check wins.
"""

import math
from typing import Any, Dict
from .errors import ValidationError
from .models import Reading

REQUIRED_FIELDS = ("vehicle_id", "lat", "lon", "speed", "fuel", "temp", "timestamp")

# Not part of the reading itself
RESERVED_KEYS = ("expected_path",)

TEMP_RANGE = (-40.0, 120.0)
FUEL_RANGE = (0.0, 100.0)
LAT_RANGE = (-90.0, 90.0)
LON_RANGE = (-180.0, 180.0)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _as_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Invalid numeric value for {name}")
    try:
        number = float(value)
    except OverflowError:
        raise ValidationError(f"Invalid numeric value for {name}")
    if not math.isfinite(number):
        raise ValidationError(f"Invalid numeric value for {name}")
    return number


def validate_reading(raw: Dict[str, Any]) -> Reading:
    """
    Validates a raw reading payload.

    Args:
        raw: decoded JSON payload

    Returns:
        the validated Reading

    Raises:
        ValidationError: with the reason of the first failed check
    """
    if not isinstance(raw, dict):
        raise ValidationError("Reading payload must be a JSON object")

    # Presence is "defined", never truthiness: 0 is a legal lat/lon/speed/fuel/temp
    if any(_is_missing(raw.get(name)) for name in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")

    # Each field is typed in the step that range checks it
    temp = _as_number("temp", raw["temp"])
    if temp < TEMP_RANGE[0] or temp > TEMP_RANGE[1]:
        raise ValidationError("Temperature out of valid range (-40°C to 120°C)")

    fuel = _as_number("fuel", raw["fuel"])
    if fuel < FUEL_RANGE[0] or fuel > FUEL_RANGE[1]:
        raise ValidationError("Fuel must be between 0% and 100%")

    lat, lon = _as_number("lat", raw["lat"]), _as_number("lon", raw["lon"])
    if lat < LAT_RANGE[0] or lat > LAT_RANGE[1] or lon < LON_RANGE[0] or lon > LON_RANGE[1]:
        raise ValidationError("Invalid coordinates")

    speed = _as_number("speed", raw["speed"])
    if speed < 0:
        raise ValidationError("Speed cannot be negative")

    extra = {
        k: v for k, v in raw.items()
        if k not in REQUIRED_FIELDS and k not in RESERVED_KEYS
    }

    return Reading(
        vehicle_id=str(raw["vehicle_id"]),
        timestamp=str(raw["timestamp"]),
        extra=extra,
        lat=lat,
        lon=lon,
        speed=speed,
        fuel=fuel,
        temp=temp,
    )
