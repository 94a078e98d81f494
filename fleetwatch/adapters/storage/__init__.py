"""
Storage adapters for FleetWatch hexagonal architecture.

This module contains the SQLite store and the store-backed role
lookup and token identity used for local runs.
"""

from .sqlite_store import SQLiteStore
from .sqlite_identity import StoreTokenIdentity
from .role_lookup import StoreRoleLookup

__all__ = ["SQLiteStore", "StoreTokenIdentity", "StoreRoleLookup"]
