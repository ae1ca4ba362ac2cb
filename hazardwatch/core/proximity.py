"""
Proximity ranking for hazardwatch.

This module ranks hazard zones by danger relative to a tracked
location: zones containing the location first, then by the severity of
the prescribed action, then by distance to the nearest vertex.
"""

from typing import Iterable, List, Optional
from .actions import action_priority
from .models import HazardEvent, Location, ProximityResult, Recommendation
from hazardwatch.common.geo import distance_to_polygon, point_in_polygon

# 행동 권고 거리 기준 (킬로미터)
MONITOR_DISTANCE_KM = 5.0
ALERT_DISTANCE_KM = 20.0

def _evaluate(location: Location, hazard: HazardEvent) -> ProximityResult:
    is_inside = point_in_polygon(location, hazard.polygon)
    distance = 0.0 if is_inside else distance_to_polygon(location, hazard.polygon)
    return ProximityResult(
        hazard=hazard,
        distance_km=distance,
        is_inside=is_inside,
        action_priority=action_priority(hazard.action),
    )

def rank(location: Optional[Location], hazards: Iterable[HazardEvent]) -> List[ProximityResult]:
    """
    위험 구역을 위험도 순으로 정렬합니다.

    폴리곤(꼭짓점 3개 이상)이 있는 이벤트만 대상이며, 정렬 기준은
    (내부 여부 내림차순, 행동 우선순위 내림차순, 거리 오름차순)입니다.
    동순위는 입력 순서를 유지합니다.

    Args:
        location: 추적 위치 (경도, 위도), None이면 빈 목록
        hazards: 위험 이벤트 목록

    Returns:
        정렬된 ProximityResult 목록
    """
    if location is None:
        return []

    results = [_evaluate(location, h) for h in hazards if h.has_polygon]
    results.sort(key=lambda r: (not r.is_inside, -r.action_priority, r.distance_km))
    return results

def nearest(location: Optional[Location], hazards: Iterable[HazardEvent]) -> Optional[ProximityResult]:
    """가장 위험한(최상위) 구역을 반환합니다. 없으면 None."""
    ranked = rank(location, hazards)
    return ranked[0] if ranked else None

def recommend(result: Optional[ProximityResult]) -> Optional[Recommendation]:
    """
    최근접 위험 구역에 대한 행동 권고를 생성합니다.

    Args:
        result: nearest() 결과

    Returns:
        행동 권고 또는 None (충분히 먼 경우)
    """
    if result is None:
        return None

    action = (result.hazard.action or "").lower()

    if result.is_inside:
        if "shelter" in action:
            return Recommendation(text="Shelter in place immediately", severity="critical")
        if "leave" in action:
            return Recommendation(text="Leave the area now", severity="critical")
        return Recommendation(text="Follow emergency service instructions", severity="critical")

    if result.distance_km < MONITOR_DISTANCE_KM:
        return Recommendation(text="Monitor conditions closely", severity="warning")

    if result.distance_km < ALERT_DISTANCE_KM:
        return Recommendation(text="Stay alert for updates", severity="caution")

    return None
