"""
Store port interface.

This module defines the protocol for the durable store. Tables are
addressed by name and rows are plain dictionaries.
"""

from typing import Any, Dict, List, Optional, Protocol

# Table names
READINGS = "vehicle_readings"
ALERTS = "alerts"
NOTIFICATIONS = "notifications"
GEOFENCES = "geofences"
USER_ROLES = "user_roles"
MAINTENANCE_LOGS = "maintenance_logs"


class StorePort(Protocol):
    """Durable store port interface"""
    
    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inserts one row.
        
        Args:
            table: table name
            record: row values
            
        Returns:
            the stored row
            
        Raises:
            SinkError: the write failed
        """
        ...
    
    async def query(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Selects rows matching every filter.
        
        Args:
            table: table name
            filters: column -> value; a list or tuple value means IN
            
        Returns:
            matching rows
            
        Raises:
            SinkError: the read failed
        """
        ...
