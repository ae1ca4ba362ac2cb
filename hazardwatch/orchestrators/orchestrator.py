"""
Polling orchestrator for hazardwatch.

This module drives the pipeline: poll the version token, fetch the full
hazard set only when it changed, select the tracked warnings and feed
them (with the tracked location) to the alert engine. All evaluations
run under one lock so engine memory is never mutated concurrently.
"""

import asyncio
import time
from typing import List, Optional
from hazardwatch.core.alert_engine import AlertEngine
from hazardwatch.core.area_report import VICTORIA_AREA_KM2, summarize_areas
from hazardwatch.core.feed import FeedSelection, select
from hazardwatch.core.models import (
    Alert,
    AreaReport,
    FeedStatus,
    HazardEvent,
    Location,
    ProximityResult,
    Recommendation,
)
from hazardwatch.core import proximity
from hazardwatch.ports.hazard_source import HazardSourcePort
from hazardwatch.observability import metrics
from hazardwatch.observability.logging_setup import get_logger

log = get_logger("hazardwatch.orchestrator")

class Orchestrator:
    """피드 폴링 오케스트레이터"""

    def __init__(self,
                 source: HazardSourcePort,
                 engine: AlertEngine,
                 *,
                 poll_interval_sec: float = 15.0,
                 fire_only: bool = True,
                 warnings_only: bool = True,
                 region_area_km2: float = VICTORIA_AREA_KM2,
                 region_name: str = "Victoria",
                 location: Optional[Location] = None):
        """
        초기화합니다.

        Args:
            source: 위험 이벤트 피드 포트
            engine: 경보 엔진
            poll_interval_sec: 폴링 간격 (초)
            fire_only: 화재 관련 이벤트만 추적
            warnings_only: warning 피드만 엔진에 전달
            region_area_km2: 면적 통계 기준 지역 면적
            region_name: 면적 통계 기준 지역 이름
            location: 초기 추적 위치 (경도, 위도)
        """
        self.source = source
        self.engine = engine
        self.poll_interval = poll_interval_sec
        self.fire_only = fire_only
        self.warnings_only = warnings_only
        self.region_area_km2 = region_area_km2
        self.region_name = region_name
        self.location: Optional[Location] = location

        self._lock = asyncio.Lock()
        self._stop = asyncio.Event()
        self._settle_task: Optional[asyncio.Task] = None
        self._selection: Optional[FeedSelection] = None

        self.last_token: Optional[str] = None
        self.last_updated: Optional[float] = None
        self.last_error: Optional[str] = None

        # 시작 시간 기록
        self.start_time = time.time()

        log.info(f"오케스트레이터 초기화됨 interval:{poll_interval_sec}s")

    @property
    def hazards(self) -> List[HazardEvent]:
        """엔진에 전달되는 현재 위험 이벤트 목록"""
        if self._selection is None:
            return []
        return list(self._selection.warnings)

    async def start(self) -> None:
        """
        오케스트레이터를 시작합니다.

        즉시 한 번 실행한 뒤 stop()이 호출될 때까지 폴링 간격마다 반복합니다.
        """
        self._stop.clear()
        log.info("폴링 시작")

        while not self._stop.is_set():
            try:
                await self.run_once()
            except Exception:
                log.exception("폴링 틱 처리 오류")

            metrics.uptime_seconds.set(time.time() - self.start_time)

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass

        log.info("폴링 중지됨")

    async def stop(self) -> None:
        """폴링 루프와 대기 중인 재평가를 중지합니다."""
        self._stop.set()
        if self._settle_task is not None and not self._settle_task.done():
            self._settle_task.cancel()
            try:
                await self._settle_task
            except asyncio.CancelledError:
                pass
        self._settle_task = None

    async def run_once(self) -> bool:
        """
        폴링 틱 한 번을 수행합니다.

        Returns:
            이전 틱이 진행 중이라 건너뛰었으면 False
        """
        if self._lock.locked():
            metrics.ticks_skipped.inc()
            log.debug("이전 틱 진행 중, 건너뜀")
            return False

        async with self._lock:
            with metrics.tick_seconds.time():
                await self._poll()
        return True

    async def _poll(self) -> None:
        try:
            token = await self.source.fetch_version_token()
        except Exception as e:
            metrics.version_checks.labels(result="error").inc()
            metrics.fetch_failures.labels(operation="fetch_version_token").inc()
            self._record_error(e)
            return

        if token == self.last_token:
            metrics.version_checks.labels(result="unchanged").inc()
            log.debug(f"피드 변경 없음 token:{token}")
            return
        metrics.version_checks.labels(result="changed").inc()

        try:
            events = await self.source.fetch_hazard_set()
        except Exception as e:
            metrics.hazard_fetches.labels(result="error").inc()
            metrics.fetch_failures.labels(operation="fetch_hazard_set").inc()
            self._record_error(e)
            return
        metrics.hazard_fetches.labels(result="ok").inc()

        self._selection = select(events, fire_only=self.fire_only, warnings_only=self.warnings_only)
        # 전체 수신이 성공한 뒤에만 토큰 기록
        self.last_token = token
        self.last_updated = time.time()
        self.last_error = None

        log.info(f"피드 갱신 token:{token} events:{len(self._selection.events)} tracked:{len(self._selection.warnings)}")
        self._evaluate()

    def _record_error(self, error: Exception) -> None:
        self.last_error = str(error)
        log.error(f"피드 수신 실패 error:{error}")

    def _evaluate(self) -> List[Alert]:
        """현재 캐시와 위치로 경보 엔진을 평가합니다. 락 안에서만 호출됩니다."""
        hazards = self.hazards
        was_seeded = self.engine.seeded

        with metrics.evaluate_seconds.time():
            alerts = self.engine.evaluate(hazards, self.location)

        for alert in alerts:
            metrics.alerts_emitted.labels(type=alert.type, severity=alert.severity).inc()
        metrics.hazards_tracked.set(len(hazards))
        metrics.active_alerts.set(len(self.engine.active_alerts()))

        if not was_seeded and self.engine.seeded:
            self._schedule_settle()
        return alerts

    def _schedule_settle(self) -> None:
        if self._settle_task is not None and not self._settle_task.done():
            self._settle_task.cancel()
        self._settle_task = asyncio.create_task(self._settle())

    async def _settle(self) -> None:
        """엔진이 준비되면 캐시된 데이터로 한 번 더 평가합니다."""
        while not self.engine.is_ready():
            ready_at = self.engine.ready_at
            if ready_at is None:
                return
            await asyncio.sleep(max(0.0, ready_at - self.engine.clock()))

        async with self._lock:
            self._evaluate()
        log.debug("경보 엔진 준비 완료")

    async def update_location(self, location: Optional[Location]) -> List[Alert]:
        """
        추적 위치를 갱신하고 캐시된 데이터로 재평가합니다.

        Args:
            location: (경도, 위도) 또는 None

        Returns:
            이번 평가에서 발생한 경보 목록
        """
        async with self._lock:
            self.location = location
            log.info(f"추적 위치 갱신 location:{location}")
            if self._selection is None:
                return []
            return self._evaluate()

    def rank(self) -> List[ProximityResult]:
        return proximity.rank(self.location, self.hazards)

    def nearest(self) -> Optional[ProximityResult]:
        return proximity.nearest(self.location, self.hazards)

    def recommendation(self) -> Optional[Recommendation]:
        return proximity.recommend(self.nearest())

    def active_alerts(self) -> List[Alert]:
        alerts = self.engine.active_alerts()
        metrics.active_alerts.set(len(alerts))
        return alerts

    def dismiss(self, alert_id: str) -> bool:
        """
        경보를 해제합니다.

        Returns:
            해당 id의 경보가 있으면 True
        """
        found = self.engine.dismiss(alert_id)
        if found:
            metrics.alerts_dismissed.inc()
            log.info(f"경보 해제됨 id:{alert_id}")
        return found

    def area_report(self) -> AreaReport:
        return summarize_areas(
            self.hazards,
            region_area_km2=self.region_area_km2,
            region_name=self.region_name,
        )

    def status(self) -> FeedStatus:
        selection = self._selection
        return FeedStatus(
            last_token=self.last_token,
            last_updated=self.last_updated,
            last_error=self.last_error,
            total_warnings=selection.total_warnings if selection else 0,
            total_incidents=selection.total_incidents if selection else 0,
            tracked_hazards=len(selection.warnings) if selection else 0,
            location=self.location,
            ready=self.engine.is_ready(),
        )
