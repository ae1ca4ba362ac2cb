"""
Alert generation for hazardwatch.

This module implements the alert state machine. On every evaluation it
compares the current hazard set and tracked location against the
engine's memory and emits alerts only on meaningful transitions:

- a new actionable warning appears (new-warning)
- a known warning changes its ``updated`` fingerprint (zone-change)
- the location enters a zone, crosses the critical distance, or a new
  hazard becomes the nearest one within range (proximity)

The engine seeds its memory from the first non-empty hazard set and
stays silent until a settle delay has elapsed. Auto-dismissal is driven
by a logical ``expires_at`` timestamp checked lazily on every read.
"""

import math
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from .actions import action_priority
from .formatting import format_distance
from .models import (
    Alert,
    AlertSeverity,
    AlertType,
    EngineMemory,
    HazardEvent,
    Location,
    ProximityResult,
    ProximitySnapshot,
)
from .proximity import nearest
from hazardwatch.observability.logging_setup import get_logger

log = get_logger("hazardwatch.alerts")

CRITICAL_THRESHOLD_KM = 2.0
DANGER_THRESHOLD_KM = 5.0

DEFAULT_DISMISS_AFTER_SEC: Dict[str, float] = {
    "info": 30.0,
    "warning": 60.0,
}

@dataclass(frozen=True)
class AlertDraft:
    """id/시각이 부여되기 전의 경보"""
    type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    hazard_id: Optional[str] = None

def detect_changes(
    hazards: Iterable[HazardEvent],
    fingerprints: Mapping[str, str],
) -> Tuple[List[AlertDraft], Dict[str, str]]:
    """
    신규/변경된 위험 이벤트를 감지합니다.

    Args:
        hazards: 현재 위험 이벤트 목록
        fingerprints: 이벤트 id -> 마지막으로 본 updated 값

    Returns:
        (경보 초안 목록, 갱신된 fingerprint 맵)
    """
    drafts: List[AlertDraft] = []
    updated = dict(fingerprints)

    for hazard in hazards:
        previous = updated.get(hazard.id)

        if previous is None:
            # 엔진이 처음 보는 이벤트
            priority = action_priority(hazard.action)
            if priority == 3:
                drafts.append(AlertDraft(
                    type="new-warning",
                    severity="critical",
                    title="New Shelter In Place Warning",
                    message=f"{hazard.name}: {hazard.location}",
                    hazard_id=hazard.id,
                ))
            elif priority > 0:
                drafts.append(AlertDraft(
                    type="new-warning",
                    severity="warning",
                    title="New Evacuation Warning",
                    message=f"{hazard.name}: {hazard.location}",
                    hazard_id=hazard.id,
                ))
        elif previous != hazard.updated:
            drafts.append(AlertDraft(
                type="zone-change",
                severity="info",
                title="Warning Updated",
                message=f"{hazard.name} has been updated",
                hazard_id=hazard.id,
            ))

        updated[hazard.id] = hazard.updated

    return drafts, updated

def evaluate_proximity(
    current: ProximityResult,
    previous: Optional[ProximitySnapshot],
    *,
    critical_threshold_km: float = CRITICAL_THRESHOLD_KM,
    danger_threshold_km: float = DANGER_THRESHOLD_KM,
) -> Optional[AlertDraft]:
    """
    최근접 위험 구역의 전이를 평가합니다. 조건은 우선순위 순으로 하나만 적용됩니다.

    Args:
        current: 이번 평가의 최근접 결과
        previous: 직전 스냅샷 (없으면 None)
        critical_threshold_km: 임계 거리
        danger_threshold_km: 신규 최근접 경보 거리

    Returns:
        경보 초안 또는 None
    """
    hazard = current.hazard
    was_inside = previous is not None and previous.is_inside
    previous_distance = previous.distance_km if previous is not None else math.inf
    previous_id = previous.hazard_id if previous is not None else None

    if current.is_inside and not was_inside:
        return AlertDraft(
            type="proximity",
            severity="critical",
            title="YOU ARE IN A DANGER ZONE",
            message=f"You are inside: {hazard.name}. {hazard.action or 'Take action immediately!'}",
            hazard_id=hazard.id,
        )

    if (not current.is_inside
            and current.distance_km <= critical_threshold_km
            and previous_distance > critical_threshold_km):
        return AlertDraft(
            type="proximity",
            severity="critical",
            title="Danger Zone Very Close",
            message=f"{hazard.name} is only {format_distance(current.distance_km)} away!",
            hazard_id=hazard.id,
        )

    if previous_id != hazard.id and current.distance_km <= danger_threshold_km:
        return AlertDraft(
            type="proximity",
            severity="warning",
            title="New Nearby Warning",
            message=f"{hazard.name} is now the closest at {format_distance(current.distance_km)}",
            hazard_id=hazard.id,
        )

    return None

class AlertEngine:
    """추적 대상 하나에 대한 경보 상태 머신"""

    def __init__(self,
                 *,
                 settle_delay_sec: float = 0.5,
                 max_retained: int = 50,
                 dismiss_after_sec: Optional[Mapping[str, float]] = None,
                 critical_threshold_km: float = CRITICAL_THRESHOLD_KM,
                 danger_threshold_km: float = DANGER_THRESHOLD_KM,
                 clock: Callable[[], float] = time.time):
        """
        초기화합니다.

        Args:
            settle_delay_sec: 초기 시드 이후 경보 발송까지 대기 시간 (초)
            max_retained: 보관할 최근 경보 수
            dismiss_after_sec: 심각도별 자동 해제 시간 (critical 제외)
            critical_threshold_km: 임계 근접 거리
            danger_threshold_km: 신규 최근접 경보 거리
            clock: 현재 시각 (epoch 초) 공급 함수
        """
        if max_retained < 1:
            raise ValueError("max_retained must be at least 1")

        self.settle_delay = settle_delay_sec
        self.max_retained = max_retained
        self.dismiss_after = dict(DEFAULT_DISMISS_AFTER_SEC)
        if dismiss_after_sec:
            self.dismiss_after.update(dismiss_after_sec)
        self.critical_threshold_km = critical_threshold_km
        self.danger_threshold_km = danger_threshold_km
        self.clock = clock

        self._memory = EngineMemory()
        self._alerts: List[Alert] = []

    @property
    def memory(self) -> EngineMemory:
        """엔진 상태의 복사본"""
        return self._memory.model_copy(deep=True)

    @property
    def seeded(self) -> bool:
        return self._memory.seeded_at is not None

    @property
    def ready_at(self) -> Optional[float]:
        if self._memory.seeded_at is None:
            return None
        return self._memory.seeded_at + self.settle_delay

    def is_ready(self, now: Optional[float] = None) -> bool:
        ready_at = self.ready_at
        if ready_at is None:
            return False
        return (self.clock() if now is None else now) >= ready_at

    def evaluate(self,
                 hazards: Sequence[HazardEvent],
                 location: Optional[Location],
                 now: Optional[float] = None) -> List[Alert]:
        """
        한 번의 평가 틱을 수행합니다.

        Args:
            hazards: 현재 위험 이벤트 목록
            location: 추적 위치 (경도, 위도) 또는 None
            now: 평가 시각 (None이면 clock 사용)

        Returns:
            이번 틱에서 새로 발생한 경보 목록
        """
        now = self.clock() if now is None else now
        self.expire(now)

        if not self.seeded:
            if hazards:
                self._seed(hazards, location, now)
            return []

        if not self.is_ready(now):
            return []

        drafts, fingerprints = detect_changes(hazards, self._memory.fingerprints)
        self._memory.fingerprints = fingerprints

        if location is not None and hazards:
            current = nearest(location, hazards)
            if current is not None:
                draft = evaluate_proximity(
                    current,
                    self._memory.previous_nearest,
                    critical_threshold_km=self.critical_threshold_km,
                    danger_threshold_km=self.danger_threshold_km,
                )
                if draft is not None:
                    drafts.append(draft)
                self._memory.previous_nearest = ProximitySnapshot.from_result(current)

        return [self._emit(draft, now) for draft in drafts]

    def _seed(self, hazards: Sequence[HazardEvent], location: Optional[Location], now: float) -> None:
        self._memory.fingerprints = {h.id: h.updated for h in hazards}
        if location is not None:
            current = nearest(location, hazards)
            if current is not None:
                self._memory.previous_nearest = ProximitySnapshot.from_result(current)
        self._memory.seeded_at = now
        log.info(f"경보 엔진 초기화됨 hazards:{len(hazards)} ready_in:{self.settle_delay}s")

    def _new_id(self, now: float) -> str:
        existing = {a.id for a in self._alerts}
        while True:
            alert_id = f"{int(now * 1000)}-{uuid.uuid4().hex[:7]}"
            if alert_id not in existing:
                return alert_id

    def _emit(self, draft: AlertDraft, now: float) -> Alert:
        expires_at = None
        if draft.severity != "critical":
            expires_at = now + self.dismiss_after[draft.severity]

        alert = Alert(
            id=self._new_id(now),
            type=draft.type,
            severity=draft.severity,
            title=draft.title,
            message=draft.message,
            timestamp=now,
            hazard_id=draft.hazard_id,
            expires_at=expires_at,
        )
        self._alerts = [alert, *self._alerts][:self.max_retained]

        log.info(f"경보 발생 type:{alert.type} severity:{alert.severity} hazard:{alert.hazard_id} title:{alert.title}")
        return alert

    def expire(self, now: Optional[float] = None) -> int:
        """
        만료 시각이 지난 경보를 해제 처리합니다.

        Returns:
            이번에 해제된 경보 수
        """
        now = self.clock() if now is None else now
        expired = 0
        for alert in self._alerts:
            if not alert.dismissed and alert.expires_at is not None and now >= alert.expires_at:
                alert.dismissed = True
                expired += 1
        if expired:
            log.debug(f"자동 해제된 경보 {expired}개")
        return expired

    def dismiss(self, alert_id: str) -> bool:
        """
        경보를 해제합니다.

        Returns:
            해당 id의 경보가 있으면 True
        """
        for alert in self._alerts:
            if alert.id == alert_id:
                alert.dismissed = True
                return True
        return False

    @property
    def alerts(self) -> List[Alert]:
        """보관 중인 전체 경보 (최신순)"""
        return [a.model_copy() for a in self._alerts]

    def active_alerts(self, now: Optional[float] = None) -> List[Alert]:
        """해제되지 않은 경보 (최신순)"""
        self.expire(now)
        return [a.model_copy() for a in self._alerts if not a.dismissed]
