"""
FleetWatch: vehicle telemetry evaluation service.
"""

__version__ = "0.1.0"
