"""
Hazard feed adapter.
"""
from .client import HazardSourceClient, HazardSourceError

__all__ = ["HazardSourceClient", "HazardSourceError"]
