"""
지리 유틸리티 단위 테스트

거리, 폴리곤 내부 판정, 꼭짓점 거리, 면적 계산을 테스트합니다.
"""

import math
import pytest
from hypothesis import given, strategies as st
from hazardwatch.common.geo import (
    close_ring, distance_to_polygon, great_circle_distance_km, haversine_distance,
    point_in_polygon, polygon_area_km2, validate_coordinates
)

KM_PER_DEGREE_LAT = 111.195

TRIANGLE = [(144.85, -37.85), (144.95, -37.85), (144.90, -37.75)]
SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


class TestHaversineDistance:
    """Haversine 거리 계산 테스트"""

    def test_same_point(self):
        assert haversine_distance(-37.8, 144.9, -37.8, 144.9) == 0.0

    def test_one_degree_on_equator(self):
        distance = haversine_distance(0, 0, 0, 1)
        assert 110 <= distance <= 112

    def test_melbourne_to_geelong(self):
        """멜버른에서 질롱까지 (약 64km)"""
        distance = haversine_distance(-37.8136, 144.9631, -38.1499, 144.3617)
        assert 60 <= distance <= 68

    def test_great_circle_uses_lon_lat_order(self):
        a = (144.9631, -37.8136)
        b = (144.3617, -38.1499)
        assert great_circle_distance_km(a, b) == pytest.approx(
            haversine_distance(a[1], a[0], b[1], b[0])
        )


class TestCloseRing:
    """링 닫기 테스트"""

    def test_open_ring_is_closed(self):
        ring = close_ring(TRIANGLE)
        assert ring[0] == ring[-1]
        assert len(ring) == 4

    def test_closed_ring_unchanged(self):
        closed = TRIANGLE + [TRIANGLE[0]]
        assert close_ring(closed) == closed

    def test_input_not_mutated(self):
        ring = list(TRIANGLE)
        close_ring(ring)
        assert ring == TRIANGLE

    def test_empty(self):
        assert close_ring(None) == []
        assert close_ring([]) == []


class TestPointInPolygon:
    """폴리곤 내부 판정 테스트"""

    def test_inside(self):
        assert point_in_polygon((144.9, -37.8), TRIANGLE)

    def test_outside(self):
        assert not point_in_polygon((145.5, -37.8), TRIANGLE)

    def test_closed_and_open_ring_agree(self):
        point = (144.9, -37.8)
        assert point_in_polygon(point, TRIANGLE) == point_in_polygon(point, TRIANGLE + [TRIANGLE[0]])

    def test_boundary_counts_as_inside(self):
        # 밑변 위의 점과 꼭짓점
        assert point_in_polygon((144.9, -37.85), TRIANGLE)
        assert point_in_polygon((144.85, -37.85), TRIANGLE)

    @pytest.mark.parametrize("polygon", [None, [], [(0, 0)], [(0, 0), (1, 1)], [(0, 0), (1, 1), (0, 0)]])
    def test_degenerate_polygon(self, polygon):
        assert not point_in_polygon((0.5, 0.5), polygon)

    def test_concave_polygon(self):
        # U자 형태: 가운데 오목한 부분은 외부
        u_shape = [(0, 0), (3, 0), (3, 3), (2, 3), (2, 1), (1, 1), (1, 3), (0, 3)]
        assert point_in_polygon((0.5, 2.0), u_shape)
        assert not point_in_polygon((1.5, 2.0), u_shape)


class TestDistanceToPolygon:
    """꼭짓점 거리 테스트"""

    def test_inside_is_zero(self):
        assert distance_to_polygon((144.9, -37.8), TRIANGLE) == 0.0

    def test_nearest_vertex(self):
        point = (144.85, -37.85 - 10 / KM_PER_DEGREE_LAT)
        assert distance_to_polygon(point, TRIANGLE) == pytest.approx(10.0, rel=1e-3)

    def test_vertex_approximation_not_edge(self):
        # 밑변 중점 바로 아래: 변까지는 1km지만 꼭짓점까지는 더 멀다
        point = (144.9, -37.85 - 1 / KM_PER_DEGREE_LAT)
        assert distance_to_polygon(point, TRIANGLE) > 4.0

    @pytest.mark.parametrize("polygon", [None, [], [(0, 0), (1, 1)]])
    def test_degenerate_is_infinite(self, polygon):
        assert distance_to_polygon((0.0, 0.0), polygon) == math.inf

    @given(
        w1=st.floats(min_value=0.05, max_value=1.0),
        w2=st.floats(min_value=0.05, max_value=1.0),
        w3=st.floats(min_value=0.05, max_value=1.0),
    )
    def test_interior_points_have_zero_distance(self, w1, w2, w3):
        """삼각형 내부의 임의 점은 내부 판정, 거리 0"""
        total = w1 + w2 + w3
        lon = sum(w * p[0] for w, p in zip((w1, w2, w3), TRIANGLE)) / total
        lat = sum(w * p[1] for w, p in zip((w1, w2, w3), TRIANGLE)) / total

        assert point_in_polygon((lon, lat), TRIANGLE)
        assert distance_to_polygon((lon, lat), TRIANGLE) == 0.0

    @given(
        near_km=st.floats(min_value=1.0, max_value=500.0),
        extra_km=st.floats(min_value=0.1, max_value=500.0),
    )
    def test_distance_grows_moving_away(self, near_km, extra_km):
        """모든 꼭짓점에서 멀어지는 방향(정남쪽)으로 이동하면 거리가 증가"""
        base_lon, base_lat = 144.9, -37.85
        near = (base_lon, base_lat - near_km / KM_PER_DEGREE_LAT)
        far = (base_lon, base_lat - (near_km + extra_km) / KM_PER_DEGREE_LAT)

        assert distance_to_polygon(far, TRIANGLE) > distance_to_polygon(near, TRIANGLE)


class TestPolygonArea:
    """면적 계산 테스트"""

    def test_one_degree_square_at_equator(self):
        # R^2 * (pi/180) * sin(1°) ≈ 12,391 km²
        assert polygon_area_km2(SQUARE) == pytest.approx(12_391, rel=1e-3)

    def test_orientation_does_not_matter(self):
        assert polygon_area_km2(SQUARE) == pytest.approx(polygon_area_km2(list(reversed(SQUARE))))

    def test_closed_ring_same_area(self):
        assert polygon_area_km2(SQUARE + [SQUARE[0]]) == pytest.approx(polygon_area_km2(SQUARE))

    @pytest.mark.parametrize("polygon", [None, [], [(0, 0), (1, 1)], [("a", "b"), (1, 1), (2, 2)]])
    def test_degenerate_is_zero(self, polygon):
        assert polygon_area_km2(polygon) == 0.0

    @given(size=st.floats(min_value=0.001, max_value=1.0))
    def test_area_non_negative(self, size):
        square = [(145.0, -37.0), (145.0 + size, -37.0), (145.0 + size, -37.0 + size), (145.0, -37.0 + size)]
        assert polygon_area_km2(square) > 0


class TestValidateCoordinates:
    """좌표 유효성 테스트"""

    def test_valid(self):
        assert validate_coordinates(-37.8, 144.9)
        assert validate_coordinates(90, 180)

    def test_invalid(self):
        assert not validate_coordinates(91, 0)
        assert not validate_coordinates(0, -181)
