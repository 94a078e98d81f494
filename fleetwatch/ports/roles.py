"""
Role lookup port interface.
"""

from typing import List, Optional, Protocol, Sequence
from fleetwatch.core.roles import Role

class RoleLookupPort(Protocol):
    """Role lookup port interface"""
    
    async def role_of(self, user_id: str) -> Optional[Role]:
        """Role of a user, None when unknown."""
        ...
    
    async def users_with_roles(self, roles: Sequence[Role]) -> List[str]:
        """User ids holding any of the roles."""
        ...
