"""
Core domain models and pure functions for FleetWatch.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .errors import (
    FleetWatchError, ValidationError, AuthorizationError, ForbiddenError,
    EvaluationError, GeometryError, SinkError
)
from .models import (
    Reading, AlertDraft, NotificationDraft, Geofence, ExpectedPath, RouteCheck, IngestResult
)
from .roles import Role, Capability, has_capability, require_capability
from .validation import validate_reading
from .thresholds import evaluate_thresholds
from .geofence import GeofenceTracker, evaluate_geofences, containing_geofences
from .route import evaluate_route_deviation
from .normalize import to_geofence, to_expected_path

__all__ = [
    "FleetWatchError", "ValidationError", "AuthorizationError", "ForbiddenError",
    "EvaluationError", "GeometryError", "SinkError",
    "Reading", "AlertDraft", "NotificationDraft", "Geofence", "ExpectedPath",
    "RouteCheck", "IngestResult",
    "Role", "Capability", "has_capability", "require_capability",
    "validate_reading", "evaluate_thresholds",
    "GeofenceTracker", "evaluate_geofences", "containing_geofences",
    "evaluate_route_deviation", "to_geofence", "to_expected_path",
]
