# fleetwatch/settings.py
from __future__ import annotations
from typing import List
from pydantic import BaseModel, Field

class Store(BaseModel):
    backend: str = "sqlite"                   # sqlite | supabase
    sqlite_path: str = "./data/fleetwatch.db"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    timeout_sec: int = 10
    read_max_retries: int = 2

class Thresholds(BaseModel):
    temp_high_c: float = 90.0
    fuel_low_pct: float = 20.0
    route_deviation_m: float = 100.0

class Geofencing(BaseModel):
    notify_roles: List[str] = Field(default_factory=lambda: ["admin", "dispatcher"])
    mode: str = "transition"                  # transition | every_reading

class Observability(BaseModel):
    http_port: int = 3000
    metrics_enabled: bool = True
    service_name: str = "FleetWatch"
    build_version: str = "0.1.0"
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

class Settings(BaseModel):
    store: Store = Field(default_factory=Store)
    thresholds: Thresholds = Field(default_factory=Thresholds)
    geofencing: Geofencing = Field(default_factory=Geofencing)
    observability: Observability = Field(default_factory=Observability)
