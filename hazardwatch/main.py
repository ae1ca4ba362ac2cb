# hazardwatch/main.py
import os, asyncio, signal
from typing import Optional
import uvicorn
from hazardwatch.settings import Settings
from hazardwatch.observability.health import create_app
from hazardwatch.observability.logging_setup import setup_logging, get_logger
from hazardwatch.adapters.hazard_source import HazardSourceClient
from hazardwatch.core.alert_engine import AlertEngine
from hazardwatch.orchestrators.orchestrator import Orchestrator

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _f(name, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw == "": return default
    return float(raw)

def build_settings() -> Settings:
    s = Settings()

    # 피드
    s.hazard_source.base_url = os.getenv("HAZARD_BASE_URL", s.hazard_source.base_url)
    s.hazard_source.delta_path = os.getenv("HAZARD_DELTA_PATH", s.hazard_source.delta_path)
    s.hazard_source.events_path = os.getenv("HAZARD_EVENTS_PATH", s.hazard_source.events_path)
    s.hazard_source.timeout_sec = int(os.getenv("HAZARD_TIMEOUT_SEC", s.hazard_source.timeout_sec))
    s.hazard_source.max_attempts = int(os.getenv("HAZARD_MAX_ATTEMPTS", s.hazard_source.max_attempts))
    s.hazard_source.retry_unit_delay_sec = float(os.getenv("HAZARD_RETRY_UNIT_DELAY_SEC", s.hazard_source.retry_unit_delay_sec))

    # 폴링/선별
    s.polling.interval_sec = float(os.getenv("POLL_INTERVAL_SEC", s.polling.interval_sec))
    s.feed.fire_only = _b("FEED_FIRE_ONLY", s.feed.fire_only)
    s.feed.warnings_only = _b("FEED_WARNINGS_ONLY", s.feed.warnings_only)

    # 근접/경보
    s.proximity.critical_threshold_km = float(os.getenv("CRITICAL_THRESHOLD_KM", s.proximity.critical_threshold_km))
    s.proximity.danger_threshold_km = float(os.getenv("DANGER_THRESHOLD_KM", s.proximity.danger_threshold_km))
    s.alerts.settle_delay_sec = float(os.getenv("ALERT_SETTLE_DELAY_SEC", s.alerts.settle_delay_sec))
    s.alerts.max_retained = int(os.getenv("ALERT_MAX_RETAINED", s.alerts.max_retained))
    s.alerts.dismiss_info_sec = float(os.getenv("ALERT_DISMISS_INFO_SEC", s.alerts.dismiss_info_sec))
    s.alerts.dismiss_warning_sec = float(os.getenv("ALERT_DISMISS_WARNING_SEC", s.alerts.dismiss_warning_sec))

    # 지역/추적 위치
    s.region.name = os.getenv("REGION_NAME", s.region.name)
    s.region.area_km2 = float(os.getenv("REGION_AREA_KM2", s.region.area_km2))
    s.tracking.latitude = _f("TRACK_LATITUDE", s.tracking.latitude)
    s.tracking.longitude = _f("TRACK_LONGITUDE", s.tracking.longitude)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("HTTP_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_json = _b("LOG_JSON", s.observability.log_json)

    return s

def build_engine(s: Settings) -> AlertEngine:
    return AlertEngine(
        settle_delay_sec=s.alerts.settle_delay_sec,
        max_retained=s.alerts.max_retained,
        dismiss_after_sec={"info": s.alerts.dismiss_info_sec, "warning": s.alerts.dismiss_warning_sec},
        critical_threshold_km=s.proximity.critical_threshold_km,
        danger_threshold_km=s.proximity.danger_threshold_km,
    )

async def start_http(settings: Settings, orchestrator: Orchestrator) -> asyncio.Task:
    app = create_app(settings, orchestrator)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=settings.observability.http_port,
                       log_level=settings.observability.log_level.lower())
    ).serve())

async def main():
    s = build_settings()
    setup_logging(s.observability.log_level, json_output=s.observability.log_json)
    log = get_logger("hazardwatch.main")
    log.info("설정 로드 완료")

    source = HazardSourceClient(
        s.hazard_source.base_url,
        delta_path=s.hazard_source.delta_path,
        events_path=s.hazard_source.events_path,
        timeout=s.hazard_source.timeout_sec,
        max_attempts=s.hazard_source.max_attempts,
        retry_unit_delay=s.hazard_source.retry_unit_delay_sec,
    )

    async with source:
        orch = Orchestrator(
            source,
            build_engine(s),
            poll_interval_sec=s.polling.interval_sec,
            fire_only=s.feed.fire_only,
            warnings_only=s.feed.warnings_only,
            region_area_km2=s.region.area_km2,
            region_name=s.region.name,
            location=s.tracking.location(),
        )
        log.info("오케스트레이터 생성 완료")

        http_task = await start_http(s, orch)
        log.info(f"HTTP 서버 시작됨 port:{s.observability.http_port}")

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, stop.set)
            except NotImplementedError: pass

        log.info("오케스트레이터 시작")
        orch_task = asyncio.create_task(orch.start())
        await stop.wait()

        log.info("종료 중")
        await orch.stop()
        await orch_task
        http_task.cancel()

if __name__ == "__main__":
    asyncio.run(main())
