"""
Supabase adapter for FleetWatch.
"""

from .client import SupabaseClient

__all__ = ["SupabaseClient"]
