"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import pytest
from unittest.mock import AsyncMock
from hazardwatch.settings import Settings
from hazardwatch.core.models import HazardEvent

# (144.9, -37.8)을 둘러싸는 삼각형 (경도, 위도)
H1_TRIANGLE = [
    (144.85, -37.85),
    (144.95, -37.85),
    (144.90, -37.75),
]

def _feature(id="H1", *, feed_type="warning", action="Leave Immediately",
             polygon=None, point=(144.9, -37.8), updated="2025-01-01T00:00:00Z",
             name="Test Fire", category1="Fire"):
    """테스트용 GeoJSON 피처"""
    geometries = []
    if point is not None:
        geometries.append({"type": "Point", "coordinates": list(point)})
    if polygon is not None:
        geometries.append({"type": "Polygon", "coordinates": [[list(p) for p in polygon] + [list(polygon[0])]]})
    return {
        "type": "Feature",
        "properties": {
            "id": id,
            "feedType": feed_type,
            "sourceOrg": "CFA",
            "category1": category1,
            "category2": "Bushfire",
            "action": action,
            "name": name,
            "location": "Testville",
            "updated": updated,
        },
        "geometry": {"type": "GeometryCollection", "geometries": geometries},
    }

@pytest.fixture
def make_feature():
    """GeoJSON 피처 팩토리"""
    return _feature

@pytest.fixture
def make_hazard():
    """HazardEvent 팩토리"""
    def _make(id="H1", *, action="Leave Immediately", polygon=None, updated="2025-01-01T00:00:00Z",
              feed_type="warning", name="Test Fire", location="Testville", category1="Fire",
              status=None):
        return HazardEvent(
            id=id,
            feed_type=feed_type,
            category1=category1,
            status=status,
            action=action,
            name=name,
            location=location,
            updated=updated,
            polygon=list(polygon) if polygon is not None else None,
        )
    return _make

@pytest.fixture
def h1_triangle():
    """H1 폴리곤"""
    return list(H1_TRIANGLE)

@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    return settings

@pytest.fixture
def mock_source():
    """테스트용 위험 이벤트 피드 포트"""
    source = AsyncMock()
    source.fetch_version_token.return_value = "v1"
    source.fetch_hazard_set.return_value = []
    return source

# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )

def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 느린 테스트 마커 추가
        if "performance" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)

        # 통합 테스트 마커 추가
        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)
