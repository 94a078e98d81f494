"""
Identity provider port interface.

This module defines the protocol for bearer credential verification.
"""

from typing import Optional, Protocol

class IdentityPort(Protocol):
    """Identity provider port interface"""
    
    async def verify(self, credential: str) -> Optional[str]:
        """
        Verifies a bearer credential.
        
        Args:
            credential: raw token without the "Bearer " prefix
            
        Returns:
            user id, or None when the credential is not valid
        """
        ...
    
    async def user_exists(self, user_id: str) -> bool:
        """
        Checks that a user id is known to the provider.
        
        Args:
            user_id: user id
        """
        ...
