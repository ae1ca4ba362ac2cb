"""
Core domain models for hazardwatch.

This module defines the core domain models using Pydantic v2
for type safety and validation.
"""

from typing import Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

# (경도, 위도)
Location = Tuple[float, float]

FeedType = Literal["warning", "incident"]
AlertType = Literal["proximity", "zone-change", "new-warning"]
AlertSeverity = Literal["critical", "warning", "info"]
RecommendationSeverity = Literal["critical", "warning", "caution"]

class CapInfo(BaseModel):
    """CAP(Common Alerting Protocol) 분류 정보"""
    model_config = ConfigDict(frozen=True)

    category: Optional[str] = None
    event: Optional[str] = None
    urgency: Optional[str] = None
    severity: Optional[str] = None
    certainty: Optional[str] = None
    sender_name: Optional[str] = None

class HazardEvent(BaseModel):
    """피드 버전 하나에 대한 위험 이벤트 스냅샷"""
    model_config = ConfigDict(frozen=True)

    id: str
    feed_type: FeedType = "incident"
    source_org: Optional[str] = None
    category1: Optional[str] = None
    category2: Optional[str] = None
    cap: Optional[CapInfo] = None
    status: Optional[str] = None
    action: Optional[str] = None
    name: str = ""
    location: str = ""
    web_headline: Optional[str] = None
    url: Optional[str] = None
    created: Optional[str] = None
    updated: str = ""
    coordinates: Optional[Location] = None
    polygon: Optional[List[Location]] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        # 피드 id는 문자열 또는 숫자
        if v is None:
            raise ValueError("hazard id is required")
        return str(v)

    @property
    def has_polygon(self) -> bool:
        return self.polygon is not None and len(self.polygon) >= 3

class ProximityResult(BaseModel):
    """위치 기준 위험 구역 순위 결과"""
    model_config = ConfigDict(frozen=True)

    hazard: HazardEvent
    distance_km: float
    is_inside: bool
    action_priority: int

class ProximitySnapshot(BaseModel):
    """직전 평가의 최근접 위험 구역"""
    model_config = ConfigDict(frozen=True)

    hazard_id: str
    distance_km: float
    is_inside: bool

    @classmethod
    def from_result(cls, result: ProximityResult) -> "ProximitySnapshot":
        return cls(
            hazard_id=result.hazard.id,
            distance_km=result.distance_km,
            is_inside=result.is_inside,
        )

class Alert(BaseModel):
    """사용자에게 노출되는 경보"""
    id: str
    type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    timestamp: float
    hazard_id: Optional[str] = None
    dismissed: bool = False
    expires_at: Optional[float] = None  # critical은 자동 해제 없음

class EngineMemory(BaseModel):
    """경보 엔진 인스턴스 전용 상태"""
    fingerprints: Dict[str, str] = Field(default_factory=dict)
    previous_nearest: Optional[ProximitySnapshot] = None
    seeded_at: Optional[float] = None

class AreaReport(BaseModel):
    """행동 등급별 경보 면적 통계"""
    region_name: str
    region_area_km2: float
    shelter_area_km2: float = 0.0
    leave_immediately_area_km2: float = 0.0
    leave_area_km2: float = 0.0
    total_warning_area_km2: float = 0.0
    shelter_percent: float = 0.0
    leave_immediately_percent: float = 0.0
    leave_percent: float = 0.0
    total_percent: float = 0.0

class Recommendation(BaseModel):
    """최근접 위험 구역에 대한 행동 권고"""
    text: str
    severity: RecommendationSeverity

class DeltaResponse(BaseModel):
    """피드 변경 여부 확인용 경량 응답"""
    last_modified: Optional[str] = None
    last_hash: Optional[str] = None

class FeedStatus(BaseModel):
    """피드 폴링 상태"""
    last_token: Optional[str] = None
    last_updated: Optional[float] = None
    last_error: Optional[str] = None
    total_warnings: int = 0
    total_incidents: int = 0
    tracked_hazards: int = 0
    location: Optional[Location] = None
    ready: bool = False
