"""
Adapters for FleetWatch hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .storage import SQLiteStore, StoreTokenIdentity, StoreRoleLookup
from .supabase import SupabaseClient

__all__ = ["SQLiteStore", "StoreTokenIdentity", "StoreRoleLookup", "SupabaseClient"]
