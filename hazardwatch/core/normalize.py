"""
Normalization functions for hazardwatch.

This module contains pure functions for converting raw hazard feed
features (GeoJSON-like) into internal domain models. Geometry is
extracted once here so downstream components never inspect raw shapes.
"""

from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from .models import CapInfo, HazardEvent, Location
from hazardwatch.observability.logging_setup import get_logger

log = get_logger("hazardwatch.normalize")

def _to_location(coords: Any) -> Optional[Location]:
    try:
        return (float(coords[0]), float(coords[1]))
    except (TypeError, ValueError, IndexError, KeyError):
        return None

def _to_ring(coords: Any) -> Optional[List[Location]]:
    # Polygon 좌표는 [외곽 링, 구멍 링...] 형태, 외곽 링만 사용
    try:
        outer = coords[0]
        ring = [(float(p[0]), float(p[1])) for p in outer]
    except (TypeError, ValueError, IndexError, KeyError):
        return None
    # 닫힘 전 기준 서로 다른 꼭짓점 3개 이상이어야 유효
    if len(set(ring)) < 3:
        return None
    return ring

def _members(geometry: Any) -> List[Dict[str, Any]]:
    if not isinstance(geometry, dict):
        return []
    if geometry.get("type") == "GeometryCollection":
        return [g for g in geometry.get("geometries") or [] if isinstance(g, dict)]
    return [geometry]

def extract_point(geometry: Any) -> Optional[Location]:
    """
    형상에서 첫 번째 Point 좌표를 추출합니다.

    Args:
        geometry: Point, Polygon 또는 GeometryCollection 형상

    Returns:
        (경도, 위도) 또는 None
    """
    for member in _members(geometry):
        if member.get("type") == "Point" and member.get("coordinates"):
            return _to_location(member["coordinates"])
    return None

def extract_polygon(geometry: Any) -> Optional[List[Location]]:
    """
    형상에서 첫 번째 Polygon의 외곽 링을 추출합니다.

    Args:
        geometry: Point, Polygon 또는 GeometryCollection 형상

    Returns:
        [(경도, 위도), ...] 또는 None
    """
    for member in _members(geometry):
        if member.get("type") == "Polygon" and member.get("coordinates"):
            return _to_ring(member["coordinates"])
    return None

def _to_cap(raw: Any) -> Optional[CapInfo]:
    if not isinstance(raw, dict):
        return None
    return CapInfo(
        category=raw.get("category"),
        event=raw.get("event"),
        urgency=raw.get("urgency"),
        severity=raw.get("severity"),
        certainty=raw.get("certainty"),
        sender_name=raw.get("senderName"),
    )

def _opt_str(v: Any) -> Optional[str]:
    return None if v is None else str(v)

def to_hazard_event(feature: Dict[str, Any]) -> HazardEvent:
    """
    원시 피처를 HazardEvent로 변환합니다.

    Args:
        feature: properties와 geometry를 가진 GeoJSON 피처

    Returns:
        정규화된 HazardEvent

    Raises:
        ValueError: properties가 없거나 id가 없는 경우
    """
    props = feature.get("properties")
    if not isinstance(props, dict):
        raise ValueError("feature has no properties")

    geometry = feature.get("geometry")
    feed_type = "warning" if props.get("feedType") == "warning" else "incident"

    return HazardEvent(
        id=props.get("id"),
        feed_type=feed_type,
        source_org=_opt_str(props.get("sourceOrg")),
        category1=_opt_str(props.get("category1")),
        category2=_opt_str(props.get("category2")),
        cap=_to_cap(props.get("cap")),
        status=_opt_str(props.get("status")),
        action=_opt_str(props.get("action")),
        name=str(props.get("name") or ""),
        location=str(props.get("location") or ""),
        web_headline=_opt_str(props.get("webHeadline")),
        url=_opt_str(props.get("url")),
        created=_opt_str(props.get("created")),
        updated=str(props.get("updated") or ""),
        coordinates=extract_point(geometry),
        polygon=extract_polygon(geometry),
    )

def to_hazard_events(collection: Any) -> List[HazardEvent]:
    """
    FeatureCollection 전체를 변환합니다. 변환할 수 없는 피처는 건너뜁니다.

    Raises:
        ValueError: 응답이 FeatureCollection 형식이 아닌 경우
    """
    if not isinstance(collection, dict) or not isinstance(collection.get("features"), list):
        raise ValueError("hazard feed is not a FeatureCollection")

    events: List[HazardEvent] = []
    for index, feature in enumerate(collection["features"]):
        if not isinstance(feature, dict):
            log.warning(f"피처 형식 오류 건너뜀 index:{index}")
            continue
        try:
            events.append(to_hazard_event(feature))
        except (ValueError, ValidationError) as e:
            log.warning(f"피처 정규화 실패 건너뜀 index:{index} error:{e}")
    return events
