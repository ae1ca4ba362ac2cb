"""
표시 형식 테스트
"""

import pytest
from hazardwatch.core.formatting import format_area, format_distance, format_percent


@pytest.mark.parametrize("km,expected", [
    (0.25, "250m"),
    (0.999, "999m"),
    (1.5, "1.5km"),
    (9.94, "9.9km"),
    (12.4, "12km"),
    (150.0, "150km"),
])
def test_format_distance(km, expected):
    assert format_distance(km) == expected


@pytest.mark.parametrize("km2,expected", [
    (0.123, "0.12 km²"),
    (0.5, "0.5 km²"),
    (12.34, "12.3 km²"),
    (10.0, "10 km²"),
    (456.7, "457 km²"),
    (12345.0, "12.3k km²"),
])
def test_format_area(km2, expected):
    assert format_area(km2) == expected


@pytest.mark.parametrize("percent,expected", [
    (0.0044, "<0.01%"),
    (0.05, "0.05%"),
    (0.47, "0.5%"),
    (12.6, "13%"),
])
def test_format_percent(percent, expected):
    assert format_percent(percent) == expected
