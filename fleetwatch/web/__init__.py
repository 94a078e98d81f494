"""
HTTP layer for FleetWatch.
"""

from .app import create_app

__all__ = ["create_app"]
