"""
Supabase client for FleetWatch.

This module talks to a Supabase project over HTTP: PostgREST for
table reads and writes, GoTrue for credential verification. One
client instance is shared by the whole process.
"""

import asyncio
import aiohttp
from typing import Any, Dict, List, Optional
from fleetwatch.core.errors import SinkError
from fleetwatch.common.retry import retry_with_backoff
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.supabase")

# Transport failures, timeouts and 5xx responses; 4xx fails at once
RETRYABLE = (aiohttp.ClientError, asyncio.TimeoutError)


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "eq.true" if value else "eq.false"
    if isinstance(value, (list, tuple, set, frozenset)):
        items = []
        for item in value:
            text = str(item).replace('"', '\\"')
            items.append(f'"{text}"')
        return f"in.({','.join(items)})"
    if value is None:
        return "is.null"
    return f"eq.{value}"


def build_params(filters: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """PostgREST query parameters for equality / IN filters."""
    params = {"select": "*"}
    for column, value in (filters or {}).items():
        params[column] = _filter_value(value)
    return params


class SupabaseClient:
    """StorePort and IdentityPort over the Supabase HTTP APIs"""
    
    def __init__(self, 
                 base_url: str, 
                 service_role_key: str, 
                 timeout: float = 10,
                 read_max_retries: int = 2):
        """
        Args:
            base_url: project URL, e.g. https://xyz.supabase.co
            service_role_key: service role API key
            timeout: request timeout (seconds)
            read_max_retries: retries for idempotent reads
        """
        self.base_url = base_url.rstrip('/')
        self.service_role_key = service_role_key
        self.timeout = timeout
        self.read_max_retries = read_max_retries
        self.session: Optional[aiohttp.ClientSession] = None
        
        log.info(f"Supabase client created base_url:{self.base_url}")
    
    async def open(self) -> None:
        if self.session is None:
            self.session = aiohttp.ClientSession(
                headers={
                    "apikey": self.service_role_key,
                    "Authorization": f"Bearer {self.service_role_key}",
                    "Content-Type": "application/json"
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
    
    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
    
    async def __aenter__(self):
        await self.open()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
    
    def _session(self) -> aiohttp.ClientSession:
        if not self.session:
            raise RuntimeError("Session not opened. Use open() or async with.")
        return self.session
    
    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inserts one row. Not retried.
        
        Raises:
            SinkError: HTTP or transport failure
        """
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            async with self._session().post(
                url, json=[record], headers={"Prefer": "return=representation"}
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise SinkError(table, f"HTTP {response.status}: {body}")
                rows = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SinkError(table, str(e) or type(e).__name__)
        
        if isinstance(rows, list) and rows:
            return rows[0]
        return dict(record)
    
    async def query(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Selects rows with equality / IN filters.
        
        Raises:
            SinkError: HTTP or transport failure after retries
        """
        url = f"{self.base_url}/rest/v1/{table}"
        params = build_params(filters)
        
        async def _request():
            async with self._session().get(url, params=params) as response:
                if 400 <= response.status < 500:
                    body = await response.text()
                    raise SinkError(table, f"HTTP {response.status}: {body}")
                response.raise_for_status()
                return await response.json()
        
        try:
            rows = await retry_with_backoff(
                _request, max_retries=self.read_max_retries, base_delay=0.2, max_delay=2.0,
                retry_on=RETRYABLE
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SinkError(table, str(e) or type(e).__name__)
        return rows if isinstance(rows, list) else []
    
    async def verify(self, credential: str) -> Optional[str]:
        """
        Resolves a user access token to its user id.
        
        Returns:
            user id, or None for a rejected token
        """
        if not credential:
            return None
        url = f"{self.base_url}/auth/v1/user"
        headers = {"Authorization": f"Bearer {credential}"}
        try:
            async with self._session().get(url, headers=headers) as response:
                if response.status != 200:
                    log.info(f"Token rejected status:{response.status}")
                    return None
                user = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error(f"Token verification failed error:{e}")
            return None
        
        user_id = (user or {}).get("id")
        return str(user_id) if user_id else None
    
    async def user_exists(self, user_id: str) -> bool:
        """Admin lookup of a user id."""
        url = f"{self.base_url}/auth/v1/admin/users/{user_id}"
        try:
            async with self._session().get(url) as response:
                if response.status == 404:
                    return False
                response.raise_for_status()
                user = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SinkError("auth.users", str(e))
        return bool((user or {}).get("id"))
