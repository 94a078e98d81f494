"""
Token table identity provider for local runs.

Credentials are looked up in the api_tokens table of a StorePort:
{"token": ..., "user_id": ...}.
"""

from typing import Optional
from fleetwatch.ports.store import StorePort, USER_ROLES
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.identity")

API_TOKENS = "api_tokens"

class StoreTokenIdentity:
    """IdentityPort backed by a token table"""
    
    def __init__(self, store: StorePort):
        self.store = store
    
    async def verify(self, credential: str) -> Optional[str]:
        if not credential:
            return None
        rows = await self.store.query(API_TOKENS, {"token": credential})
        if not rows:
            return None
        user_id = rows[0].get("user_id")
        return str(user_id) if user_id else None
    
    async def user_exists(self, user_id: str) -> bool:
        if await self.store.query(API_TOKENS, {"user_id": user_id}):
            return True
        return bool(await self.store.query(USER_ROLES, {"user_id": user_id}))
    
    async def issue(self, token: str, user_id: str) -> None:
        """Registers a token (seeding and tests)."""
        await self.store.insert(API_TOKENS, {"token": token, "user_id": user_id})
        log.info(f"Token registered user_id:{user_id}")
