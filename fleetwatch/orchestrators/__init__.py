"""
Orchestrators for FleetWatch.

This module contains the orchestrators that coordinate
the flow between ports and adapters.
"""
from .pipeline import TelemetryPipeline

__all__ = ["TelemetryPipeline"]
