"""
Hazard source API client for hazardwatch.

This module provides a client for the public hazard feed: a cheap
delta endpoint whose hash changes when the feed may have changed, and
the full GeoJSON event collection.
"""

import aiohttp
from typing import Any, Dict, List, Optional
from hazardwatch.common.retry import retry_with_backoff
from hazardwatch.core.models import DeltaResponse, HazardEvent
from hazardwatch.core.normalize import to_hazard_events
from hazardwatch.observability import metrics
from hazardwatch.observability.logging_setup import get_logger

log = get_logger("hazardwatch.source")

class HazardSourceError(RuntimeError):
    """재시도 한도를 모두 소진한 피드 요청 실패"""

class HazardSourceClient:
    """위험 이벤트 피드 API 클라이언트"""

    def __init__(self,
                 base_url: str,
                 *,
                 delta_path: str = "/osom-delta.json",
                 events_path: str = "/events-geojson.json",
                 timeout: int = 10,
                 max_attempts: int = 3,
                 retry_unit_delay: float = 1.0):
        """
        초기화합니다.

        Args:
            base_url: 피드 기본 URL
            delta_path: 변경 확인 엔드포인트 경로
            events_path: 전체 이벤트 엔드포인트 경로
            timeout: 요청 타임아웃 (초)
            max_attempts: 요청당 최대 시도 횟수
            retry_unit_delay: 선형 백오프 단위 지연 (초)
        """
        self.base_url = base_url.rstrip('/')
        self.delta_path = delta_path
        self.events_path = events_path
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_unit_delay = retry_unit_delay
        self.session: Optional[aiohttp.ClientSession] = None

        log.info(f"피드 클라이언트 초기화됨 base_url:{self.base_url}")

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self.session = aiohttp.ClientSession(
            headers={"Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        if self.session:
            await self.session.close()
            self.session = None

    async def _get_json(self, path: str, operation: str) -> Any:
        """
        GET 요청을 재시도와 함께 수행합니다.

        네트워크 오류, 2xx 이외 응답, JSON 파싱 실패는 모두 일시 오류로
        간주해 재시도합니다.

        Raises:
            HazardSourceError: 재시도 한도 소진
        """
        if not self.session:
            raise RuntimeError("세션이 초기화되지 않았습니다. async with를 사용하세요.")

        url = f"{self.base_url}{path}"

        async def _request():
            async with self.session.get(url) as response:
                response.raise_for_status()
                return await response.json(content_type=None)

        def _count_retry(attempt: int, error: Exception) -> None:
            metrics.fetch_retries.labels(operation=operation).inc()

        try:
            return await retry_with_backoff(
                _request,
                max_attempts=self.max_attempts,
                unit_delay=self.retry_unit_delay,
                operation_name=operation,
                on_retry=_count_retry,
            )
        except Exception as e:
            raise HazardSourceError(f"{operation} failed after {self.max_attempts} attempts: {e}") from e

    async def fetch_delta(self) -> DeltaResponse:
        """변경 확인 응답을 가져옵니다."""
        data: Dict[str, Any] = await self._get_json(self.delta_path, "fetch_delta")
        if not isinstance(data, dict):
            raise HazardSourceError("delta response is not an object")
        return DeltaResponse(
            last_modified=None if data.get("lastModified") is None else str(data["lastModified"]),
            last_hash=None if data.get("lastHash") is None else str(data["lastHash"]),
        )

    async def fetch_version_token(self) -> str:
        """
        피드 버전 토큰을 가져옵니다.

        Returns:
            lastHash (없으면 lastModified)

        Raises:
            HazardSourceError: 요청 실패 또는 토큰 없음
        """
        delta = await self.fetch_delta()
        token = delta.last_hash or delta.last_modified
        if not token:
            raise HazardSourceError("delta response has neither lastHash nor lastModified")
        return token

    async def fetch_hazard_set(self) -> List[HazardEvent]:
        """
        전체 위험 이벤트를 가져옵니다.

        Returns:
            HazardEvent 목록 (빈 목록도 유효한 데이터)

        Raises:
            HazardSourceError: 요청 실패 또는 FeatureCollection 형식 오류
        """
        collection = await self._get_json(self.events_path, "fetch_hazard_set")
        try:
            events = to_hazard_events(collection)
        except ValueError as e:
            raise HazardSourceError(str(e)) from e
        log.info(f"위험 이벤트 수신 count:{len(events)}")
        return events
