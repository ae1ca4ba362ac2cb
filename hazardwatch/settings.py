# hazardwatch/settings.py
from __future__ import annotations
from typing import Optional, Tuple
from pydantic import BaseModel, Field

class HazardSource(BaseModel):
    base_url: str = "https://emergency.vic.gov.au/public"
    delta_path: str = "/osom-delta.json"
    events_path: str = "/events-geojson.json"
    timeout_sec: int = 10
    max_attempts: int = 3
    retry_unit_delay_sec: float = 1.0

class Polling(BaseModel):
    interval_sec: float = 15.0

class Feed(BaseModel):
    fire_only: bool = True          # 화재 관련 이벤트만 추적
    warnings_only: bool = True      # 엔진에는 warning 피드만 전달

class Proximity(BaseModel):
    critical_threshold_km: float = 2.0
    danger_threshold_km: float = 5.0

class AlertPolicy(BaseModel):
    settle_delay_sec: float = 0.5
    max_retained: int = 50
    dismiss_info_sec: float = 30.0
    dismiss_warning_sec: float = 60.0

class Region(BaseModel):
    name: str = "Victoria"
    area_km2: float = 227_444.0

class Tracking(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def location(self) -> Optional[Tuple[float, float]]:
        """고정 추적 좌표를 (경도, 위도)로 반환합니다."""
        if self.latitude is None or self.longitude is None:
            return None
        return (self.longitude, self.latitude)

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "hazardwatch"
    build_version: str = "0.1.0"
    build_date: str = "2026-01-01"
    log_level: str = "INFO"
    log_json: bool = False

class Settings(BaseModel):
    # 하위 섹션 (기본값/팩토리로 누락 방지)
    hazard_source: HazardSource = Field(default_factory=HazardSource)
    polling: Polling = Field(default_factory=Polling)
    feed: Feed = Field(default_factory=Feed)
    proximity: Proximity = Field(default_factory=Proximity)
    alerts: AlertPolicy = Field(default_factory=AlertPolicy)
    region: Region = Field(default_factory=Region)
    tracking: Tracking = Field(default_factory=Tracking)
    observability: Observability = Field(default_factory=Observability)
