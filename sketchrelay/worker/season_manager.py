import asyncio
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sketchrelay.core.config import settings
from sketchrelay.core.cache import create_redis
from sketchrelay.services.season_service import SeasonService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def check_active_seasons(season_service: SeasonService) -> int:
    """
    진행중(ACTIVE)인 시즌들 중 모든 게임이 끝난 시즌을 COMPLETED로 전환합니다.
    전환된 시즌 수를 반환합니다.
    """
    logger.info("🔄 Checking active seasons for completion...")
    completed = 0
    try:
        season_ids = await season_service.list_active_season_ids()
    except Exception as e:
        logger.error(f"❌ Failed to load active seasons: {e}")
        return 0

    for season_id in season_ids:
        result = await season_service.check_season_completion(season_id)
        if result.is_success:
            completed += 1
        elif result.is_error:
            logger.error(f"❌ Completion check failed for season {season_id}: {result.key}")

    logger.info(f"✅ Completion check done. {completed}/{len(season_ids)} seasons completed.")
    return completed

async def season_manager():
    scheduler = AsyncIOScheduler()
    service = SeasonService(redis_client=create_redis())

    trigger = IntervalTrigger(minutes=settings.SEASON_COMPLETION_CHECK_MINUTES)
    scheduler.add_job(check_active_seasons, trigger, args=[service])

    logger.info(f"⏳ Season Manager Scheduler Started (every {settings.SEASON_COMPLETION_CHECK_MINUTES} min)")
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)

if __name__ == "__main__":
    try:
        asyncio.run(season_manager())
    except (KeyboardInterrupt, SystemExit):
        pass
