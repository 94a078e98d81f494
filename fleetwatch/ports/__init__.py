"""
Port interfaces for FleetWatch hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .store import StorePort
from .identity import IdentityPort
from .roles import RoleLookupPort

__all__ = ["StorePort", "IdentityPort", "RoleLookupPort"]
