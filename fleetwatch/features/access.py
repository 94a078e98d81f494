"""
Request authentication and capability checks for FleetWatch.

Credential verification is delegated to the identity provider; the
role lookup backs the single capability check.
"""

from dataclasses import dataclass
from typing import Optional
from fleetwatch.core.errors import AuthorizationError
from fleetwatch.core.roles import Capability, Role, require_capability
from fleetwatch.ports.identity import IdentityPort
from fleetwatch.ports.roles import RoleLookupPort
from fleetwatch.observability.logging_setup import get_logger

log = get_logger("fleetwatch.access")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller"""
    user_id: str
    role: Optional[Role] = None


def bearer_token(authorization: Optional[str]) -> str:
    """
    Extracts the token of an Authorization header.

    Raises:
        AuthorizationError: header missing or not a Bearer header
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthorizationError("Missing or invalid authorization header")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthorizationError("Missing or invalid authorization header")
    return token


class AccessControl:
    """Authenticates callers and enforces capabilities"""

    def __init__(self, identity: IdentityPort, roles: RoleLookupPort):
        self.identity = identity
        self.roles = roles

    async def authenticate(self, authorization: Optional[str]) -> Principal:
        """
        Verifies the Authorization header.

        Args:
            authorization: raw header value

        Returns:
            Principal without role resolution

        Raises:
            AuthorizationError: missing header or rejected token
        """
        token = bearer_token(authorization)
        try:
            user_id = await self.identity.verify(token)
        except Exception as e:
            log.error(f"Identity provider error: {e}")
            user_id = None
        if not user_id:
            raise AuthorizationError("Invalid token")
        return Principal(user_id=user_id)

    async def authorize(self, authorization: Optional[str], capability: Capability) -> Principal:
        """
        Authenticates and requires a capability.

        Raises:
            AuthorizationError: authentication failed
            ForbiddenError: role lacks the capability
        """
        principal = await self.authenticate(authorization)
        role = await self.roles.role_of(principal.user_id)
        require_capability(role, capability)
        return Principal(user_id=principal.user_id, role=role)
