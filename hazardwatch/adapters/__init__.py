"""
Adapters for hazardwatch.

This module contains the concrete implementations of the port
interfaces that talk to external systems.
"""

from .hazard_source import HazardSourceClient, HazardSourceError

__all__ = ["HazardSourceClient", "HazardSourceError"]
