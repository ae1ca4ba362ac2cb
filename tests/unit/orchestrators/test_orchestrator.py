"""
오케스트레이터 단위 테스트

이 모듈은 폴링 틱, 토큰 기반 재수신 생략, 오류 처리, 위치 갱신,
안정화 후 재평가, 시작/중지를 테스트합니다.
"""

import pytest
import asyncio
from hazardwatch.adapters.hazard_source import HazardSourceError
from hazardwatch.core.alert_engine import AlertEngine
from hazardwatch.orchestrators.orchestrator import Orchestrator

OUTSIDE = (144.9, -37.9)
INSIDE = (144.9, -37.8)


@pytest.fixture
def h1(make_hazard, h1_triangle):
    return make_hazard("H1", action="Leave Immediately", polygon=h1_triangle)


@pytest.fixture
async def orchestrator(mock_source, h1):
    mock_source.fetch_hazard_set.return_value = [h1]
    orch = Orchestrator(mock_source, AlertEngine(settle_delay_sec=0.0), poll_interval_sec=0.01, location=OUTSIDE)
    yield orch
    await orch.stop()


class TestRunOnce:
    """폴링 틱 테스트"""

    async def test_first_tick_fetches_and_seeds(self, orchestrator, mock_source):
        assert await orchestrator.run_once()

        mock_source.fetch_version_token.assert_awaited_once()
        mock_source.fetch_hazard_set.assert_awaited_once()
        assert [h.id for h in orchestrator.hazards] == ["H1"]
        assert orchestrator.engine.seeded

        status = orchestrator.status()
        assert status.last_token == "v1"
        assert status.last_updated is not None
        assert status.last_error is None
        assert status.total_warnings == 1
        assert status.tracked_hazards == 1

    async def test_unchanged_token_skips_fetch(self, orchestrator, mock_source):
        await orchestrator.run_once()
        await orchestrator.run_once()

        assert mock_source.fetch_version_token.await_count == 2
        mock_source.fetch_hazard_set.assert_awaited_once()

    async def test_changed_token_refetches(self, orchestrator, mock_source):
        await orchestrator.run_once()
        mock_source.fetch_version_token.return_value = "v2"
        await orchestrator.run_once()

        assert mock_source.fetch_hazard_set.await_count == 2
        assert orchestrator.status().last_token == "v2"

    async def test_token_error_keeps_cache(self, orchestrator, mock_source):
        await orchestrator.run_once()
        mock_source.fetch_version_token.side_effect = HazardSourceError("delta down")

        assert await orchestrator.run_once()

        status = orchestrator.status()
        assert status.last_error == "delta down"
        assert status.last_token == "v1"
        assert [h.id for h in orchestrator.hazards] == ["H1"]

    async def test_set_error_does_not_record_token(self, orchestrator, mock_source):
        mock_source.fetch_hazard_set.side_effect = HazardSourceError("events down")

        await orchestrator.run_once()

        status = orchestrator.status()
        assert status.last_token is None
        assert status.last_error == "events down"
        assert orchestrator.hazards == []

        # 다음 틱에서 같은 토큰이어도 다시 수신
        mock_source.fetch_hazard_set.side_effect = None
        await orchestrator.run_once()
        assert orchestrator.status().last_token == "v1"
        assert orchestrator.status().last_error is None

    async def test_overlapping_tick_skipped(self, orchestrator, mock_source):
        async with orchestrator._lock:
            assert not await orchestrator.run_once()
        mock_source.fetch_version_token.assert_not_awaited()

    async def test_incidents_not_tracked(self, mock_source, make_hazard, h1_triangle):
        mock_source.fetch_hazard_set.return_value = [
            make_hazard("W", feed_type="warning", polygon=h1_triangle),
            make_hazard("I", feed_type="incident", polygon=h1_triangle),
            make_hazard("F", feed_type="warning", category1="Flood", name="Flood", polygon=h1_triangle),
        ]
        orch = Orchestrator(mock_source, AlertEngine(settle_delay_sec=0.0))

        await orch.run_once()

        status = orch.status()
        assert [h.id for h in orch.hazards] == ["W"]
        assert status.total_warnings == 1
        assert status.total_incidents == 1
        await orch.stop()


class TestLocationAndQueries:
    """위치 갱신 및 조회 테스트"""

    async def test_location_update_triggers_alert(self, orchestrator):
        await orchestrator.run_once()

        alerts = await orchestrator.update_location(INSIDE)

        assert [a.title for a in alerts] == ["YOU ARE IN A DANGER ZONE"]
        assert [a.id for a in orchestrator.active_alerts()] == [alerts[0].id]

    async def test_location_before_first_fetch(self, orchestrator):
        assert await orchestrator.update_location(INSIDE) == []
        assert orchestrator.location == INSIDE

    async def test_clear_location(self, orchestrator):
        await orchestrator.run_once()
        await orchestrator.update_location(None)

        assert orchestrator.rank() == []
        assert orchestrator.nearest() is None
        assert orchestrator.recommendation() is None

    async def test_queries(self, orchestrator):
        await orchestrator.run_once()

        results = orchestrator.rank()
        assert [r.hazard.id for r in results] == ["H1"]
        assert not results[0].is_inside
        assert orchestrator.recommendation().text == "Stay alert for updates"

        report = orchestrator.area_report()
        assert report.leave_immediately_area_km2 > 0
        assert report.region_name == "Victoria"

    async def test_dismiss(self, orchestrator):
        await orchestrator.run_once()
        alerts = await orchestrator.update_location(INSIDE)

        assert orchestrator.dismiss(alerts[0].id)
        assert orchestrator.active_alerts() == []
        assert not orchestrator.dismiss("missing")


class TestSettle:
    """안정화 후 재평가 테스트"""

    async def test_settle_task_reevaluates(self, mock_source, h1):
        mock_source.fetch_hazard_set.return_value = [h1]
        orch = Orchestrator(mock_source, AlertEngine(settle_delay_sec=0.2), location=OUTSIDE)

        await orch.run_once()
        assert not orch.status().ready
        assert orch._settle_task is not None

        await asyncio.sleep(0.3)

        assert orch._settle_task.done()
        assert orch.status().ready
        await orch.stop()

    async def test_stop_cancels_settle(self, mock_source, h1):
        mock_source.fetch_hazard_set.return_value = [h1]
        orch = Orchestrator(mock_source, AlertEngine(settle_delay_sec=30.0))

        await orch.run_once()
        task = orch._settle_task
        await orch.stop()

        assert task.cancelled()


class TestStartStop:
    """시작/중지 테스트"""

    async def test_loop_polls_until_stopped(self, orchestrator, mock_source):
        task = asyncio.create_task(orchestrator.start())
        await asyncio.sleep(0.05)
        await orchestrator.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert mock_source.fetch_version_token.await_count >= 2
        mock_source.fetch_hazard_set.assert_awaited_once()

    async def test_loop_survives_errors(self, orchestrator, mock_source):
        mock_source.fetch_version_token.side_effect = [TypeError("bug"), "v1", "v1", "v1", "v1", "v1", "v1", "v1"]

        task = asyncio.create_task(orchestrator.start())
        await asyncio.sleep(0.05)
        await orchestrator.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert mock_source.fetch_version_token.await_count >= 2
        assert orchestrator.status().last_token == "v1"
