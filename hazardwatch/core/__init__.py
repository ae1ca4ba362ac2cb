"""
Core domain models and pure functions for hazardwatch.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    Alert,
    AreaReport,
    EngineMemory,
    FeedStatus,
    HazardEvent,
    Location,
    ProximityResult,
    ProximitySnapshot,
    Recommendation,
)
from .normalize import to_hazard_event, to_hazard_events
from .proximity import nearest, rank, recommend
from .alert_engine import AlertEngine
from .area_report import summarize_areas

__all__ = [
    "Alert", "AreaReport", "EngineMemory", "FeedStatus", "HazardEvent", "Location",
    "ProximityResult", "ProximitySnapshot", "Recommendation",
    "to_hazard_event", "to_hazard_events", "nearest", "rank", "recommend",
    "AlertEngine", "summarize_areas",
]
