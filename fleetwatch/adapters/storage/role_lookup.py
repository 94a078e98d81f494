"""
Role lookup over the user_roles table of any StorePort.
"""

from typing import List, Optional, Sequence
from fleetwatch.core.roles import Role
from fleetwatch.ports.store import StorePort, USER_ROLES
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.roles")

class StoreRoleLookup:
    """RoleLookupPort backed by user_roles rows {"user_id", "role"}"""
    
    def __init__(self, store: StorePort):
        self.store = store
    
    async def role_of(self, user_id: str) -> Optional[Role]:
        """
        Role of a user.
        
        Args:
            user_id: user id
            
        Returns:
            the first known role assigned to the user, or None
        """
        rows = await self.store.query(USER_ROLES, {"user_id": user_id})
        for row in rows:
            role = Role.parse(row.get("role"))
            if role is not None:
                return role
        if rows:
            log.warning(f"Unknown role value user_id:{user_id} role:{rows[0].get('role')}")
        return None
    
    async def users_with_roles(self, roles: Sequence[Role]) -> List[str]:
        """
        Distinct user ids holding any of the roles, in store order.
        """
        if not roles:
            return []
        rows = await self.store.query(USER_ROLES, {"role": [r.value for r in roles]})
        users: List[str] = []
        for row in rows:
            user_id = row.get("user_id")
            if user_id and str(user_id) not in users:
                users.append(str(user_id))
        return users
    
    async def assign(self, user_id: str, role: Role) -> None:
        await self.store.insert(USER_ROLES, {"user_id": user_id, "role": role.value})
