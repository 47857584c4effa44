import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from sketchrelay.services.scheduler_service import SchedulerService


def _soon(ms: int = 150) -> datetime:
    return datetime.now(timezone.utc) + timedelta(milliseconds=ms)

@pytest.mark.asyncio
async def test_schedule_job_fires_once_with_data():
    service = SchedulerService(enabled=True)
    service.start()
    fired = []

    async def callback(data):
        fired.append(data)

    try:
        assert service.schedule_job("season-activation-s1", _soon(), callback, data="s1") is True
        assert service.has_job("season-activation-s1")
        await asyncio.sleep(1.0)
    finally:
        service.shutdown()

    assert fired == ["s1"]
    assert not service.has_job("season-activation-s1")

@pytest.mark.asyncio
async def test_failing_job_does_not_affect_other_jobs():
    service = SchedulerService(enabled=True)
    service.start()
    fired = []

    async def broken(data):
        raise RuntimeError("boom")

    def healthy(data):
        fired.append(data)

    try:
        service.schedule_job("broken", _soon(), broken, data="x")
        service.schedule_job("healthy", _soon(250), healthy, data="y")
        await asyncio.sleep(1.0)

        # 스케줄러는 계속 사용 가능
        assert service.schedule_job("later", _soon(100), healthy, data="z") is True
        await asyncio.sleep(0.8)
    finally:
        service.shutdown()

    assert fired == ["y", "z"]

@pytest.mark.asyncio
async def test_rescheduling_same_id_replaces_previous():
    service = SchedulerService(enabled=True)
    service.start()
    fired = []

    try:
        service.schedule_job("job", _soon(200), lambda data: fired.append("first"), data=1)
        service.schedule_job("job", _soon(300), lambda data: fired.append("second"), data=1)
        await asyncio.sleep(1.0)
    finally:
        service.shutdown()

    assert fired == ["second"]

@pytest.mark.asyncio
async def test_cancel_job():
    service = SchedulerService(enabled=True)
    service.start()
    fired = []

    try:
        service.schedule_job("job", _soon(300), lambda data: fired.append(data), data="x")
        assert service.cancel_job("job") is True
        assert service.has_job("job") is False
        # 없는 작업 취소는 에러가 아님
        assert service.cancel_job("job") is False
        await asyncio.sleep(0.6)
    finally:
        service.shutdown()

    assert fired == []

def test_past_fire_date_is_rejected():
    service = SchedulerService(enabled=True)
    past = datetime.now(timezone.utc) - timedelta(seconds=1)
    assert service.schedule_job("job", past, lambda data: None, data="x") is False
    assert not service.has_job("job")

def test_naive_fire_date_is_treated_as_utc():
    service = SchedulerService(enabled=True)
    naive_future = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=1)
    assert service.schedule_job("job", naive_future, lambda data: None, data="x") is True
    assert service.has_job("job")

def test_disabled_scheduler_reports_unavailable():
    service = SchedulerService(enabled=False)
    assert service.available is False
    assert service.schedule_job("job", _soon(), lambda data: None) is False
    assert service.cancel_job("job") is False
    assert service.has_job("job") is False
    service.start()
    service.shutdown()
