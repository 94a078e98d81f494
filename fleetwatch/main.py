# fleetwatch/main.py
import os, asyncio, signal
from dataclasses import dataclass
from typing import Any, Optional
import uvicorn
from fleetwatch.settings import Settings
from fleetwatch.core.geofence import GeofenceTracker
from fleetwatch.core.roles import Capability, parse_roles, roles_with
from fleetwatch.adapters.storage import SQLiteStore, StoreRoleLookup, StoreTokenIdentity
from fleetwatch.adapters.supabase import SupabaseClient
from fleetwatch.features.access import AccessControl
from fleetwatch.orchestrators.pipeline import TelemetryPipeline
from fleetwatch.web.app import create_app
from fleetwatch.observability.logging_setup import setup_logger, get_logger

log = get_logger("fleetwatch.main")

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _list(name, default):
    value = os.getenv(name)
    if value is None: return default
    return [v.strip() for v in value.split(",") if v.strip()]

def build_settings() -> Settings:
    s = Settings()

    # STORE
    s.store.backend = os.getenv("STORE_BACKEND", s.store.backend).lower()
    s.store.sqlite_path = os.getenv("SQLITE_PATH", s.store.sqlite_path)
    s.store.supabase_url = os.getenv("SUPABASE_URL", s.store.supabase_url)
    s.store.supabase_service_role_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY", s.store.supabase_service_role_key)
    s.store.timeout_sec = int(os.getenv("STORE_TIMEOUT_SEC", s.store.timeout_sec))

    # THRESHOLDS
    s.thresholds.temp_high_c = float(os.getenv("TEMP_HIGH_C", s.thresholds.temp_high_c))
    s.thresholds.fuel_low_pct = float(os.getenv("FUEL_LOW_PCT", s.thresholds.fuel_low_pct))
    s.thresholds.route_deviation_m = float(os.getenv("ROUTE_DEVIATION_M", s.thresholds.route_deviation_m))

    # GEOFENCING
    s.geofencing.notify_roles = _list("NOTIFY_ROLES", s.geofencing.notify_roles)
    s.geofencing.mode = os.getenv("GEOFENCE_MODE", s.geofencing.mode)

    # OBSERVABILITY
    s.observability.http_port = int(os.getenv("PORT", s.observability.http_port))
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.cors_origins = _list("CORS_ORIGINS", s.observability.cors_origins)

    return s

@dataclass
class Services:
    store: Any
    identity: Any
    roles: StoreRoleLookup
    pipeline: TelemetryPipeline
    access: AccessControl
    supabase: Optional[SupabaseClient] = None

async def build_services(s: Settings) -> Services:
    """Builds the store client once and injects it everywhere."""
    supabase = None
    if s.store.backend == "supabase":
        if not s.store.supabase_url or not s.store.supabase_service_role_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required")
        supabase = SupabaseClient(
            s.store.supabase_url,
            s.store.supabase_service_role_key,
            timeout=s.store.timeout_sec,
            read_max_retries=s.store.read_max_retries,
        )
        await supabase.open()
        store = identity = supabase
    elif s.store.backend == "sqlite":
        directory = os.path.dirname(s.store.sqlite_path)
        if directory: os.makedirs(directory, exist_ok=True)
        store = SQLiteStore(s.store.sqlite_path); await store.init()
        identity = StoreTokenIdentity(store)
    else:
        raise RuntimeError(f"Unknown STORE_BACKEND: {s.store.backend}")

    roles = StoreRoleLookup(store)
    notify_roles = parse_roles(s.geofencing.notify_roles) or roles_with(Capability.RECEIVE_GEOFENCE_NOTIFICATIONS)

    pipeline = TelemetryPipeline(
        store, roles, identity, GeofenceTracker(s.geofencing.mode),
        notify_roles=notify_roles,
        temp_high_c=s.thresholds.temp_high_c,
        fuel_low_pct=s.thresholds.fuel_low_pct,
        route_deviation_m=s.thresholds.route_deviation_m,
    )
    access = AccessControl(identity, roles)
    return Services(store=store, identity=identity, roles=roles, pipeline=pipeline, access=access, supabase=supabase)

async def main():
    s = build_settings()
    setup_logger(s.observability.log_level)
    log.info(f"Settings loaded backend:{s.store.backend} geofence_mode:{s.geofencing.mode}")

    services = await build_services(s)
    app = create_app(s, services.pipeline, services.access, services.store)

    server = uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=s.observability.http_port, log_level=s.observability.log_level.lower())
    )
    http_task = asyncio.create_task(server.serve())
    log.info(f"HTTP server started port:{s.observability.http_port}")

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    await asyncio.wait([stop, http_task], return_when=asyncio.FIRST_COMPLETED)
    server.should_exit = True
    await http_task
    await services.pipeline.drain()
    if services.supabase: await services.supabase.close()
    log.info("Shutdown complete")

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
