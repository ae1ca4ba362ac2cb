"""
Feed selection for hazardwatch.

This module narrows the raw hazard set to the events the engines track
(fire-related events, optionally warnings only) and orders them by the
action they prescribe.
"""

from typing import Iterable, List, NamedTuple
from .actions import action_priority
from .models import HazardEvent

# 심각도 순서 (높음 -> 낮음), 그 외는 뒤로
SEVERITY_RANK = {
    "Extreme": 0,
    "Moderate": 1,
    "Minor": 2,
}

FIRE_CATEGORY2 = ("Fire", "Bushfire", "Grass Fire")

class FeedSelection(NamedTuple):
    events: List[HazardEvent]
    warnings: List[HazardEvent]

    @property
    def total_warnings(self) -> int:
        return sum(1 for e in self.events if e.feed_type == "warning")

    @property
    def total_incidents(self) -> int:
        return len(self.events) - self.total_warnings

def is_fire_related(event: HazardEvent) -> bool:
    """
    화재 관련 이벤트인지 확인합니다.

    피드마다 화재 분류가 들어가는 필드가 달라 여러 필드를 함께 확인합니다.
    """
    if event.cap is not None and event.cap.category == "Fire":
        return True
    category1 = event.category1 or ""
    category2 = event.category2 or ""
    if "Fire" in category1 or "Burn" in category1:
        return True
    if any(word in category2 for word in FIRE_CATEGORY2):
        return True
    return "fire" in event.name.lower()

def _severity_rank(event: HazardEvent) -> int:
    severity = event.status or (event.cap.severity if event.cap else None) or "Minor"
    return SEVERITY_RANK.get(severity, 3)

def sort_by_priority(events: Iterable[HazardEvent]) -> List[HazardEvent]:
    """행동 우선순위 내림차순, 이후 심각도 순으로 정렬합니다."""
    return sorted(events, key=lambda e: (-action_priority(e.action), _severity_rank(e)))

def select(events: Iterable[HazardEvent], *, fire_only: bool = True, warnings_only: bool = True) -> FeedSelection:
    """
    추적 대상 이벤트를 선별합니다.

    Args:
        events: 정규화된 전체 이벤트
        fire_only: 화재 관련 이벤트만 유지
        warnings_only: 엔진용 목록을 warning 피드로 제한

    Returns:
        (정렬된 전체 이벤트, 엔진에 전달할 경보 목록)
    """
    selected = [e for e in events if not fire_only or is_fire_related(e)]
    ordered = sort_by_priority(selected)
    if warnings_only:
        warnings = [e for e in ordered if e.feed_type == "warning"]
    else:
        warnings = list(ordered)
    return FeedSelection(events=ordered, warnings=warnings)
