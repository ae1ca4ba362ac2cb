"""
HTTP endpoints for hazardwatch.

This module implements health, readiness, metrics, and info endpoints
for monitoring, plus the pull-based query surface over the running
orchestrator (proximity ranking, alerts, area statistics, feed status)
and the tracked location input.
"""

from fastapi import FastAPI, HTTPException, Body
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from pydantic import BaseModel
import time
from typing import Optional
from hazardwatch.settings import Settings
from hazardwatch.common.geo import validate_coordinates
from hazardwatch.core.formatting import format_area, format_distance, format_percent
from hazardwatch.core.models import ProximityResult
from hazardwatch.observability.logging_setup import get_logger
from hazardwatch.orchestrators.orchestrator import Orchestrator

log = get_logger("hazardwatch.http")

class LocationUpdate(BaseModel):
    """추적 위치 입력 (둘 다 null이면 위치 해제)"""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

def _proximity_json(result: ProximityResult) -> dict:
    data = result.model_dump(mode="json")
    data["distance_text"] = format_distance(result.distance_km)
    return data

def create_app(settings: Settings, orchestrator: Optional[Orchestrator] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Hazard proximity and alerting service"
    )

    start_time = time.time()

    def _orch() -> Orchestrator:
        if orchestrator is None:
            raise HTTPException(status_code=503, detail="Orchestrator not running")
        return orchestrator

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트 (첫 피드 수신 이후 ready)"""
        is_ready = orchestrator is not None and orchestrator.last_token is not None
        return JSONResponse({
            "status": "ready" if is_ready else "starting",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        }, status_code=200 if is_ready else 503)

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        try:
            return Response(
                generate_latest(),
                media_type=CONTENT_TYPE_LATEST
            )
        except Exception as e:
            log.error(f"메트릭 생성 오류: {e}")
            raise HTTPException(status_code=500, detail="Metrics generation failed")

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "poll_interval_sec": settings.polling.interval_sec,
            "region": settings.region.name
        })

    @app.get("/proximity")
    async def proximity_ranking():
        """위험도 순으로 정렬된 위험 구역 목록"""
        return {"results": [_proximity_json(r) for r in _orch().rank()]}

    @app.get("/proximity/nearest")
    async def proximity_nearest():
        """최근접 위험 구역과 행동 권고"""
        orch = _orch()
        current = orch.nearest()
        recommendation = orch.recommendation()
        return {
            "nearest": _proximity_json(current) if current else None,
            "recommendation": recommendation.model_dump() if recommendation else None
        }

    @app.get("/alerts")
    async def alerts():
        """해제되지 않은 경보 목록 (최신순)"""
        return {"alerts": [a.model_dump() for a in _orch().active_alerts()]}

    @app.post("/alerts/{alert_id}/dismiss")
    async def dismiss_alert(alert_id: str):
        """경보를 해제합니다."""
        if not _orch().dismiss(alert_id):
            raise HTTPException(status_code=404, detail=f"Alert not found: {alert_id}")
        return {"ok": True, "id": alert_id}

    @app.get("/areas")
    async def areas():
        """행동 등급별 경보 면적 통계"""
        report = _orch().area_report()
        data = report.model_dump()
        data["text"] = {
            "shelter": format_area(report.shelter_area_km2),
            "leave_immediately": format_area(report.leave_immediately_area_km2),
            "leave": format_area(report.leave_area_km2),
            "total": format_area(report.total_warning_area_km2),
            "total_percent": format_percent(report.total_percent)
        }
        return data

    @app.get("/status")
    async def status():
        """피드 폴링 상태"""
        return _orch().status().model_dump()

    @app.put("/location")
    async def update_location(payload: Optional[LocationUpdate] = Body(default=None)):
        """추적 위치를 갱신합니다. 본문이 null이면 위치를 해제합니다."""
        orch = _orch()

        location = None
        if payload is not None and (payload.latitude is not None or payload.longitude is not None):
            if payload.latitude is None or payload.longitude is None:
                raise HTTPException(status_code=422, detail="latitude and longitude are both required")
            if not validate_coordinates(payload.latitude, payload.longitude):
                raise HTTPException(status_code=422, detail="Coordinates out of range")
            location = (payload.longitude, payload.latitude)

        emitted = await orch.update_location(location)
        log.info(f"위치 갱신 요청 처리 완료 alerts:{len(emitted)}")
        return {
            "ok": True,
            "location": list(location) if location else None,
            "alerts": [a.model_dump() for a in emitted]
        }

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "proximity": "/proximity",
                "nearest": "/proximity/nearest",
                "alerts": "/alerts",
                "dismiss": "/alerts/{id}/dismiss",
                "areas": "/areas",
                "status": "/status",
                "location": "/location"
            }
        })

    return app
