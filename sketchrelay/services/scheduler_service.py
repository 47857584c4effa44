# sketchrelay/services/scheduler_service.py
import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from sketchrelay.core.config import settings
from sketchrelay.core.constants import JOB_TYPE_GENERIC

logger = logging.getLogger(__name__)

JobCallback = Callable[..., Any]


class SchedulerService:
    """
    프로세스 로컬 1회성 예약 작업 (job id 기준).
    APScheduler MemoryJobStore 위에서 동작하므로 프로세스 재시작 시 예약은 사라집니다.
    """

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None, enabled: Optional[bool] = None):
        if enabled is None:
            enabled = settings.SCHEDULER_ENABLED
        self._scheduler: Optional[AsyncIOScheduler] = None
        if enabled:
            self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

    @property
    def available(self) -> bool:
        return self._scheduler is not None

    def start(self):
        if self._scheduler is not None and not self._scheduler.running:
            self._scheduler.start()
            logger.info("⏳ SchedulerService started")

    def shutdown(self):
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("SchedulerService stopped")

    def schedule_job(
        self,
        job_id: str,
        fire_at: datetime,
        callback: JobCallback,
        data: Any = None,
        job_type: str = JOB_TYPE_GENERIC,
    ) -> bool:
        """
        1회성 작업을 예약합니다. 같은 job_id로 다시 예약하면 이전 예약을 대체합니다.
        스케줄러를 쓸 수 없으면 False (호출 측은 "기능 꺼짐" 으로 취급해야 함).
        """
        if self._scheduler is None:
            logger.warning(f"Scheduler disabled. Job '{job_id}' ({job_type}) not scheduled.")
            return False

        if fire_at.tzinfo is None:
            fire_at = fire_at.replace(tzinfo=timezone.utc)
        if fire_at <= datetime.now(timezone.utc):
            logger.warning(f"Job '{job_id}' has a fire date in the past ({fire_at.isoformat()}). Skipping scheduling.")
            return False

        try:
            self._scheduler.add_job(
                self._run_job,
                trigger=DateTrigger(run_date=fire_at),
                id=job_id,
                name=job_type,
                args=[job_id, callback, data],
                replace_existing=True,
                misfire_grace_time=settings.SCHEDULER_MISFIRE_GRACE_SECONDS,
            )
        except Exception as e:
            logger.error(f"Error scheduling job '{job_id}': {e}", exc_info=True)
            return False

        logger.info(f"Job '{job_id}' ({job_type}) scheduled for {fire_at.isoformat()}")
        return True

    def cancel_job(self, job_id: str) -> bool:
        """대기중인 작업을 취소합니다. 없는 작업 취소는 에러가 아님 (False 반환)."""
        if self._scheduler is None:
            return False
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            logger.debug(f"Job '{job_id}' not found for cancellation.")
            return False
        logger.info(f"Job '{job_id}' cancelled.")
        return True

    def has_job(self, job_id: str) -> bool:
        if self._scheduler is None:
            return False
        return self._scheduler.get_job(job_id) is not None

    async def _run_job(self, job_id: str, callback: JobCallback, data: Any):
        # 콜백 예외는 여기서 끊어서 다른 작업/스케줄러에 영향이 없도록 함
        logger.info(f"Executing job '{job_id}'...")
        try:
            result = callback(data) if data is not None else callback()
            if inspect.isawaitable(result):
                await result
            logger.info(f"Job '{job_id}' executed successfully.")
        except Exception as e:
            logger.error(f"Error executing job '{job_id}': {e}", exc_info=True)
