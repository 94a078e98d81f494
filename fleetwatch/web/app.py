"""
HTTP endpoints for FleetWatch.

This module implements the ingestion and administration endpoints
plus health, readiness, metrics and info endpoints. Status mapping:
ValidationError -> 400, AuthorizationError -> 401, ForbiddenError -> 403,
store failure -> 503.
"""

import time
from typing import Any, Optional
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from fleetwatch.core.errors import AuthorizationError, ForbiddenError, SinkError, ValidationError
from fleetwatch.core.roles import Capability
from fleetwatch.features.access import AccessControl
from fleetwatch.features.geofences import register_geofence
from fleetwatch.features.maintenance import record_maintenance
from fleetwatch.orchestrators.pipeline import TelemetryPipeline
from fleetwatch.ports.store import GEOFENCES, StorePort
from fleetwatch.settings import Settings
from fleetwatch.observability import metrics
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.web")


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")


def create_app(settings: Settings,
               pipeline: TelemetryPipeline,
               access: AccessControl,
               store: StorePort) -> FastAPI:
    """Creates the FastAPI application around already built services."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="FleetWatch telemetry evaluation service"
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.observability.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    start_time = time.time()

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": exc.reason})

    @app.exception_handler(AuthorizationError)
    async def authorization_error(request: Request, exc: AuthorizationError):
        metrics.auth_failures.labels(kind="unauthenticated").inc()
        return JSONResponse(status_code=401, content={"error": str(exc)})

    @app.exception_handler(ForbiddenError)
    async def forbidden_error(request: Request, exc: ForbiddenError):
        metrics.auth_failures.labels(kind="forbidden").inc()
        return JSONResponse(status_code=403, content={"error": str(exc)})

    @app.exception_handler(SinkError)
    async def sink_error(request: Request, exc: SinkError):
        log.error(f"Store failure error:{exc}")
        return JSONResponse(status_code=503, content={"error": f"Store unavailable: {exc}"})

    @app.post("/api/ingest-vehicle")
    async def ingest_vehicle(request: Request, authorization: Optional[str] = Header(default=None)):
        """Ingests one reading."""
        await access.authenticate(authorization)
        raw = await _json_body(request)
        try:
            result = await pipeline.ingest(raw)
        except SinkError as e:
            return JSONResponse(status_code=503, content={"error": f"Error inserting reading: {e}"})
        return {
            "success": True,
            "alerts": [a.type for a in result.alerts],
            "notifications": len(result.notifications),
            "deviated": result.deviated,
        }

    @app.post("/api/maintenance-logs", status_code=201)
    async def maintenance_logs(request: Request, authorization: Optional[str] = Header(default=None)):
        """Records a maintenance log entry (technicians only)."""
        principal = await access.authorize(authorization, Capability.LOG_MAINTENANCE)
        payload = await _json_body(request)
        row = await record_maintenance(store, payload, principal.user_id)
        return {"success": True, "maintenance_log": row}

    @app.post("/api/geofences", status_code=201)
    async def geofences(request: Request, authorization: Optional[str] = Header(default=None)):
        """Registers a geofence (admins only)."""
        await access.authorize(authorization, Capability.MANAGE_GEOFENCES)
        payload = await _json_body(request)
        row = await register_geofence(store, payload)
        return {"success": True, "geofence": row}

    @app.get("/health")
    async def health():
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """Ready once the store answers a read."""
        try:
            await store.query(GEOFENCES)
        except Exception as e:
            log.warning(f"Readiness check failed error:{e}")
            return JSONResponse(status_code=503, content={
                "status": "unavailable",
                "service": settings.observability.service_name,
                "timestamp": time.time()
            })
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def prometheus_metrics():
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        metrics.uptime_seconds.set(time.time() - start_time)
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "uptime_seconds": int(time.time() - start_time),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "store_backend": settings.store.backend,
            "geofence_mode": pipeline.tracker.mode
        })

    @app.get("/")
    async def root():
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "ingest": "/api/ingest-vehicle",
                "maintenance_logs": "/api/maintenance-logs",
                "geofences": "/api/geofences",
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info"
            }
        })

    return app
