"""
Core domain models for FleetWatch.

This module defines the core domain models using Pydantic v2
for type safety and validation. All models are frozen value objects.
"""

from typing import List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

AlertType = Literal["fuel", "route", "temp"]
AlertSeverity = Literal["low", "medium", "high"]

# (lon, lat)
Coordinate = Tuple[float, float]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Reading(_Frozen):
    """Validated telemetry reading"""
    vehicle_id: str
    lat: float
    lon: float
    speed: float
    fuel: float
    temp: float
    timestamp: str
    extra: dict = Field(default_factory=dict)

    @property
    def point(self) -> Coordinate:
        return (self.lon, self.lat)

    def to_record(self) -> dict:
        """Row written to the vehicle_readings table."""
        record = dict(self.extra)
        record.update(
            vehicle_id=self.vehicle_id,
            lat=self.lat,
            lon=self.lon,
            speed=self.speed,
            fuel=self.fuel,
            temp=self.temp,
            timestamp=self.timestamp,
        )
        return record


class AlertDraft(_Frozen):
    """Alert computed by an evaluator, not yet persisted"""
    vehicle_id: str
    type: AlertType
    severity: AlertSeverity
    message: str
    status: Literal["new"] = "new"

    def to_record(self) -> dict:
        return self.model_dump()


class NotificationDraft(_Frozen):
    """Notification computed by the geofence evaluator"""
    user_id: str
    type: Literal["geofence"] = "geofence"
    message: str
    read: bool = False

    def to_record(self) -> dict:
        return self.model_dump()


class Geofence(_Frozen):
    """Named polygon region, single outer ring of (lon, lat) vertices"""
    id: Optional[str] = None
    location_name: str
    ring: List[Coordinate]

    @property
    def key(self) -> str:
        return self.id if self.id is not None else self.location_name


class ExpectedPath(_Frozen):
    """Planned route, at least two (lon, lat) vertices"""
    vertices: List[Coordinate] = Field(min_length=2)


class RouteCheck(_Frozen):
    """Route deviation evaluation result"""
    deviated: bool
    distance_m: Optional[float] = None
    alert: Optional[AlertDraft] = None


class IngestResult(_Frozen):
    """Outcome of one ingested reading"""
    vehicle_id: str
    alerts: List[AlertDraft] = Field(default_factory=list)
    notifications: List[NotificationDraft] = Field(default_factory=list)
    deviated: Optional[bool] = None
