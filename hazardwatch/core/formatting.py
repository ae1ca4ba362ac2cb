"""
Display formatting helpers for hazardwatch.

Human-readable distance, area and percentage strings used in alert
messages and area reports.
"""

def format_distance(km: float) -> str:
    """거리를 표시용 문자열로 변환합니다 (1km 미만은 미터 단위)."""
    if km < 1:
        return f"{round(km * 1000)}m"
    if km < 10:
        return f"{km:.1f}km"
    return f"{round(km)}km"

def format_area(km2: float) -> str:
    """면적을 표시용 문자열로 변환합니다."""
    if km2 < 1:
        return f"{round(km2, 2):g} km²"
    if km2 < 100:
        return f"{round(km2, 1):g} km²"
    if km2 < 1000:
        return f"{round(km2)} km²"
    return f"{km2 / 1000:.1f}k km²"

def format_percent(percent: float) -> str:
    """비율을 표시용 문자열로 변환합니다."""
    if percent < 0.01:
        return "<0.01%"
    if percent < 0.1:
        return f"{percent:.2f}%"
    if percent < 1:
        return f"{percent:.1f}%"
    return f"{round(percent)}%"
