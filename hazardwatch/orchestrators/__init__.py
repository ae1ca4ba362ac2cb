"""
Orchestrators for hazardwatch.

This module contains the orchestrators that coordinate
the flow between ports and adapters.
"""
from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
