"""
Area coverage statistics for hazardwatch.

This module sums warning polygon areas per action tier and reports
each tier as a share of a fixed reference region.
"""

from typing import Dict, Iterable
from .actions import action_tier
from .models import AreaReport, HazardEvent
from hazardwatch.common.geo import polygon_area_km2

# 빅토리아 주 육지 면적 (제곱킬로미터)
VICTORIA_AREA_KM2 = 227_444.0

def _percent(area_km2: float, region_area_km2: float) -> float:
    if region_area_km2 <= 0:
        return 0.0
    return area_km2 / region_area_km2 * 100

def summarize_areas(hazards: Iterable[HazardEvent],
                    *,
                    region_area_km2: float = VICTORIA_AREA_KM2,
                    region_name: str = "Victoria") -> AreaReport:
    """
    행동 등급별 경보 면적을 집계합니다.

    폴리곤이 없거나 행동 등급(shelter/leave immediately/leave)이 없는
    이벤트는 면적 합계에서 제외됩니다.

    Args:
        hazards: 위험 이벤트 목록
        region_area_km2: 기준 지역 면적 (제곱킬로미터)
        region_name: 기준 지역 이름

    Returns:
        면적 통계
    """
    sums: Dict[str, float] = {"shelter": 0.0, "leave_immediately": 0.0, "leave": 0.0}

    for hazard in hazards:
        if not hazard.polygon:
            continue
        tier = action_tier(hazard.action)
        if tier is None:
            continue
        sums[tier] += polygon_area_km2(hazard.polygon)

    total = sum(sums.values())

    return AreaReport(
        region_name=region_name,
        region_area_km2=region_area_km2,
        shelter_area_km2=sums["shelter"],
        leave_immediately_area_km2=sums["leave_immediately"],
        leave_area_km2=sums["leave"],
        total_warning_area_km2=total,
        shelter_percent=_percent(sums["shelter"], region_area_km2),
        leave_immediately_percent=_percent(sums["leave_immediately"], region_area_km2),
        leave_percent=_percent(sums["leave"], region_area_km2),
        total_percent=_percent(total, region_area_km2),
    )
