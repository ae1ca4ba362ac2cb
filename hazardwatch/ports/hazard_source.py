"""
Hazard source port interface.

This module defines the protocol for fetching the hazard feed.
"""

from typing import List, Protocol
from hazardwatch.core.models import HazardEvent

class HazardSourcePort(Protocol):
    """위험 이벤트 피드 포트 인터페이스"""

    async def fetch_version_token(self) -> str:
        """
        피드 변경 여부를 나타내는 버전 토큰을 가져옵니다.

        Returns:
            피드가 바뀌었을 수 있을 때만 달라지는 불투명 문자열
        """
        ...

    async def fetch_hazard_set(self) -> List[HazardEvent]:
        """
        전체 위험 이벤트 스냅샷을 가져옵니다.

        Returns:
            형상이 추출된 HazardEvent 목록 (빈 목록도 유효)
        """
        ...
