"""
Test configuration and fixtures.

This module provides pytest configuration and shared fixtures:
an in-memory store with failure injection, SQLite paths and
sample readings / geofences.
"""

import pytest
import pytest_asyncio
import asyncio
import tempfile
import os
from collections import defaultdict
from fleetwatch.adapters.storage.sqlite_store import SQLiteStore
from fleetwatch.core.errors import SinkError
from fleetwatch.settings import Settings


class MemoryStore:
    """StorePort kept in dictionaries, with optional failure injection"""

    def __init__(self, fail_when=None, fail_query=()):
        self.tables = defaultdict(list)
        self.attempts = []
        self.fail_when = fail_when
        self.fail_query = set(fail_query)

    def seed(self, table, row):
        row = dict(row)
        row.setdefault("id", len(self.tables[table]) + 1)
        self.tables[table].append(row)
        return row

    async def insert(self, table, record):
        self.attempts.append((table, dict(record)))
        if self.fail_when is not None and self.fail_when(table, record):
            raise SinkError(table, "injected failure")
        return self.seed(table, record)

    async def query(self, table, filters=None):
        if table in self.fail_query:
            raise SinkError(table, "injected read failure")

        def match(row):
            for key, value in (filters or {}).items():
                if isinstance(value, (list, tuple, set, frozenset)):
                    if row.get(key) not in value:
                        return False
                elif row.get(key) != value:
                    return False
            return True

        return [dict(r) for r in self.tables[table] if match(r)]

    def rows(self, table):
        return list(self.tables[table])


SQUARE = [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]


def geofence_row(name="Depot", ring=None, geofence_id=None):
    row = {
        "location_name": name,
        "geojson_polygon": {"type": "Polygon", "coordinates": [ring or SQUARE]},
    }
    if geofence_id is not None:
        row["id"] = geofence_id
    return row


def make_raw(**overrides):
    raw = {
        "vehicle_id": "truck-1",
        "lat": 45.0,
        "lon": 45.0,
        "speed": 60,
        "fuel": 50,
        "temp": 70,
        "timestamp": "2024-05-01T12:00:00Z",
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def raw_reading():
    return make_raw()


@pytest.fixture
def temp_db_path():
    """Temporary SQLite file path"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest_asyncio.fixture
async def sqlite_store(temp_db_path):
    store = SQLiteStore(temp_db_path)
    await store.init()
    return store


@pytest.fixture
def sample_settings():
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    return settings


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: integration test marker")


def pytest_collection_modifyitems(config, items):
    for item in items:
        if asyncio.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)
        if "integration" in item.name or "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def reading_factory():
    """make_raw(**overrides)"""
    return make_raw


@pytest.fixture
def geofence_factory():
    """geofence_row(name, ring, geofence_id)"""
    return geofence_row


@pytest.fixture
def store_factory():
    """MemoryStore(fail_when=None, fail_query=())"""
    return MemoryStore
