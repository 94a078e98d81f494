"""
Metrics definitions for FleetWatch.

This module defines Prometheus metrics for monitoring
the telemetry evaluation pipeline.
"""

from prometheus_client import Counter, Histogram, Gauge

# Counters
readings_received = Counter(
    "fleetwatch_readings_received_total",
    "Number of readings received by the ingestion endpoint"
)

readings_rejected = Counter(
    "fleetwatch_readings_rejected_total",
    "Number of readings rejected by validation",
    ["reason"]
)

readings_stored = Counter(
    "fleetwatch_readings_stored_total",
    "Number of readings written to the store"
)

alerts_emitted = Counter(
    "fleetwatch_alerts_emitted_total",
    "Number of alerts written to the store",
    ["type", "severity"]
)

notifications_emitted = Counter(
    "fleetwatch_notifications_emitted_total",
    "Number of geofence notifications written to the store"
)

route_deviations = Counter(
    "fleetwatch_route_deviations_total",
    "Number of readings classified as off route"
)

sink_failures = Counter(
    "fleetwatch_sink_failures_total",
    "Store writes that failed",
    ["table"]
)

evaluator_errors = Counter(
    "fleetwatch_evaluator_errors_total",
    "Evaluator failures absorbed by the pipeline",
    ["evaluator"]
)

auth_failures = Counter(
    "fleetwatch_auth_failures_total",
    "Requests rejected by authentication or authorization",
    ["kind"]
)

# Histograms
evaluation_seconds = Histogram(
    "fleetwatch_evaluation_duration_seconds",
    "Time spent evaluating one reading",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

# Gauges
tracked_vehicles = Gauge(
    "fleetwatch_tracked_vehicles",
    "Vehicles with a remembered geofence state"
)

uptime_seconds = Gauge(
    "fleetwatch_uptime_seconds",
    "Service uptime in seconds"
)
