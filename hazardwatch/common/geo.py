"""
Geographic utilities for hazardwatch.

This module provides the pure geometry kernel used by the proximity
engine and the area reporter: great-circle distance, point-in-polygon
testing, nearest-vertex distance and spherical polygon area.

All coordinates handed to the public functions are (longitude, latitude)
pairs, the same order the hazard feed uses. Every function is total:
malformed geometry degrades to "no geometry" instead of raising.
"""

import math
from typing import List, Optional, Sequence, Tuple

Point = Tuple[float, float]
Ring = Sequence[Sequence[float]]

# 평균 지구 반지름 (킬로미터)
EARTH_RADIUS_KM = 6371.0088

# 면적 계산용 WGS84 적도 반지름 (미터)
EQUATORIAL_RADIUS_M = 6378137.0

# 경계선 판정 허용 오차 (도 단위)
_BOUNDARY_EPS = 1e-12

def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (킬로미터).

    Args:
        lat1: 첫 번째 지점의 위도
        lon1: 첫 번째 지점의 경도
        lat2: 두 번째 지점의 위도
        lon2: 두 번째 지점의 경도

    Returns:
        두 지점 간의 거리 (킬로미터)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    # 부동소수점 오차로 1을 넘는 경우 방지
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_KM

def great_circle_distance_km(a: Point, b: Point) -> float:
    """(경도, 위도) 두 점 사이의 대원 거리 (킬로미터)."""
    return haversine_distance(a[1], a[0], b[1], b[0])

def _as_points(ring: Optional[Ring]) -> List[Point]:
    """링을 (경도, 위도) float 튜플 목록으로 변환합니다. 실패 시 빈 목록."""
    if not ring:
        return []
    try:
        return [(float(p[0]), float(p[1])) for p in ring]
    except (TypeError, ValueError, IndexError):
        return []

def close_ring(ring: Optional[Ring]) -> List[Point]:
    """
    링을 닫힌 형태로 반환합니다 (첫 점 == 마지막 점).

    원본 링은 변경하지 않습니다.
    """
    points = _as_points(ring)
    if points and points[0] != points[-1]:
        points.append(points[0])
    return points

def _open_ring(ring: Optional[Ring]) -> List[Point]:
    points = _as_points(ring)
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]
    return points

def _on_segment(x: float, y: float, a: Point, b: Point) -> bool:
    (ax, ay), (bx, by) = a, b
    cross = (bx - ax) * (y - ay) - (by - ay) * (x - ax)
    if abs(cross) > _BOUNDARY_EPS:
        return False
    return (min(ax, bx) - _BOUNDARY_EPS <= x <= max(ax, bx) + _BOUNDARY_EPS and
            min(ay, by) - _BOUNDARY_EPS <= y <= max(ay, by) + _BOUNDARY_EPS)

def point_in_polygon(point: Point, polygon: Optional[Ring]) -> bool:
    """
    점이 폴리곤 내부에 있는지 Ray casting 알고리즘으로 확인합니다.

    링은 내부적으로 닫히며, 경계선(변/꼭짓점) 위의 점은 내부로 판정합니다.

    Args:
        point: 확인할 점 (경도, 위도)
        polygon: 폴리곤의 꼭짓점들 [(경도, 위도), ...]

    Returns:
        점이 폴리곤 내부 또는 경계에 있으면 True, 외부에 있으면 False
    """
    ring = close_ring(polygon)
    if len(ring) < 4:  # 닫힌 링 기준 꼭짓점 3개 미만
        return False
    try:
        x, y = float(point[0]), float(point[1])
    except (TypeError, ValueError, IndexError):
        return False

    inside = False
    for a, b in zip(ring, ring[1:]):
        if _on_segment(x, y, a, b):
            return True
        (xi, yi), (xj, yj) = a, b
        if (yi > y) != (yj > y):
            xinters = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < xinters:
                inside = not inside

    return inside

def distance_to_polygon(point: Point, polygon: Optional[Ring]) -> float:
    """
    점에서 폴리곤까지의 최소 거리 (킬로미터).

    내부이면 0을 반환합니다. 외부이면 링의 꼭짓점까지의 최소 대원 거리를
    사용합니다 (변 위의 보간은 하지 않는 근사치). 링이 비었거나 꼭짓점이
    3개 미만이면 무한대를 반환합니다.
    """
    vertices = _open_ring(polygon)
    if len(vertices) < 3:
        return math.inf

    if point_in_polygon(point, vertices):
        return 0.0

    try:
        return min(great_circle_distance_km(point, v) for v in vertices)
    except (TypeError, ValueError, IndexError):
        return math.inf

def polygon_area_km2(polygon: Optional[Ring]) -> float:
    """
    구면 위 폴리곤 링의 면적 (제곱킬로미터).

    꼭짓점이 3개 미만이거나 계산에 실패하면 0을 반환합니다.
    """
    vertices = _open_ring(polygon)
    n = len(vertices)
    if n < 3:
        return 0.0

    try:
        total = 0.0
        for i in range(n):
            lower = vertices[i - 1]
            middle = vertices[i]
            upper = vertices[(i + 1) % n]
            total += (math.radians(upper[0]) - math.radians(lower[0])) * math.sin(math.radians(middle[1]))
        area_m2 = abs(total * EQUATORIAL_RADIUS_M * EQUATORIAL_RADIUS_M / 2.0)
    except (TypeError, ValueError, OverflowError):
        return 0.0

    if not math.isfinite(area_m2):
        return 0.0
    return area_m2 / 1_000_000

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180
