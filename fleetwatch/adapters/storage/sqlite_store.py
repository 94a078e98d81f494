"""
SQLite-based store for FleetWatch.

This module implements the StorePort on a local SQLite file. Each
row is kept as a JSON document; filters use json_extract.
"""

import aiosqlite
import json
import re
import time
from typing import Any, Dict, List, Optional
from fleetwatch.core.errors import SinkError
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.sqlite")

# SQLite schema
SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tbl TEXT NOT NULL,
    data TEXT NOT NULL,
    created_at INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_records_tbl ON records(tbl);
"""

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"invalid identifier: {name!r}")
    return name


def _where(table: str, filters: Optional[Dict[str, Any]]):
    clauses = ["tbl = ?"]
    params: List[Any] = [table]
    for column, value in (filters or {}).items():
        path = f"$.{_check_identifier(column)}"
        if isinstance(value, (list, tuple, set, frozenset)):
            values = list(value)
            if not values:
                clauses.append("0")
                continue
            clauses.append(f"json_extract(data, ?) IN ({', '.join('?' for _ in values)})")
            params.append(path)
            params.extend(values)
        elif value is None:
            clauses.append("json_extract(data, ?) IS NULL")
            params.append(path)
        else:
            clauses.append("json_extract(data, ?) = ?")
            params.extend([path, value])
    return " AND ".join(clauses), params


class SQLiteStore:
    """SQLite StorePort implementation"""
    
    def __init__(self, path: str):
        """
        Args:
            path: SQLite database file path
        """
        self.path = path
        log.info(f"SQLiteStore created path:{path}")
    
    async def init(self) -> None:
        """Creates the schema."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info(f"SQLiteStore schema ready path:{self.path}")
    
    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inserts one row.
        
        Args:
            table: table name
            record: JSON serializable row
            
        Returns:
            the row with its assigned id
        """
        _check_identifier(table)
        try:
            payload = json.dumps(record)
        except (TypeError, ValueError) as e:
            raise SinkError(table, f"record is not serializable: {e}")
        
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute(
                    "INSERT INTO records (tbl, data, created_at) VALUES (?, ?, ?)",
                    (table, payload, int(time.time()))
                )
                await db.commit()
                row_id = cursor.lastrowid
        except aiosqlite.Error as e:
            raise SinkError(table, str(e))
        
        stored = dict(record)
        stored.setdefault("id", row_id)
        return stored
    
    async def query(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Selects rows in insertion order.
        
        Args:
            table: table name
            filters: column -> value; a list value means IN
            
        Returns:
            matching rows
        """
        _check_identifier(table)
        where, params = _where(table, filters)
        
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute(
                    f"SELECT id, data FROM records WHERE {where} ORDER BY id ASC",
                    params
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise SinkError(table, str(e))
        
        result = []
        for row_id, data in rows:
            record = json.loads(data)
            record.setdefault("id", row_id)
            result.append(record)
        return result
    
    async def count(self, table: str) -> int:
        """Number of rows in a table."""
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM records WHERE tbl = ?", (table,))
            result = await cursor.fetchone()
            return result[0] if result else 0
