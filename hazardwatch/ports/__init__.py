"""
Port interfaces for hazardwatch.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .hazard_source import HazardSourcePort

__all__ = ["HazardSourcePort"]
