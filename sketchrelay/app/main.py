# sketchrelay/app/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from sketchrelay.core.config import settings
from sketchrelay.core.cache import create_redis
from sketchrelay.core.database import wait_for_db
from sketchrelay.create_tables import create_all_tables
from sketchrelay.core.exceptions import SketchRelayError
from sketchrelay.app.exception_handlers import sketchrelay_exception_handler, general_exception_handler
from sketchrelay.app.routers import players, seasons
from sketchrelay.services.scheduler_service import SchedulerService
from sketchrelay.services.season_service import SeasonService

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # 시즌 활성화 타이머는 이 프로세스 메모리에만 존재 (재시작 시 유실)
    scheduler = SchedulerService(enabled=settings.SCHEDULER_ENABLED and settings.ENVIRONMENT != "test")
    redis_client = create_redis()
    app.state.season_service = SeasonService(scheduler=scheduler, redis_client=redis_client)

    try:
        # 1. DB 연결 대기
        await wait_for_db()
        # 2. 개발 환경에서는 테이블 자동 생성
        if settings.DEBUG:
            await create_all_tables()
        # 3. 스케줄러 시작
        scheduler.start()
    except Exception as e:
        logger.error(f"[lifespan] Startup failure: {e}")

    yield

    scheduler.shutdown()
    await redis_client.aclose()
    logger.info("[lifespan] Shutdown complete")

tags_metadata = [
    {"name": "players", "description": "Player identity (lazy creation)"},
    {"name": "seasons", "description": "Season lifecycle: create, join, activate, terminate, results"},
]

app = FastAPI(
    title="SketchRelay Season API",
    description="Season orchestration for turn-based collaborative drawing/writing games",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=tags_metadata
)

# Prometheus Metrics (Expose /metrics)
Instrumentator().instrument(app).expose(app)

# CORS 설정: 허용할 출처(Origin) 목록 (환경설정에서 주입)
if settings.DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:[0-9]+)?", # 로컬호스트 모든 포트 허용
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_exception_handler(SketchRelayError, sketchrelay_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

@app.get("/")
def read_root():
    return {
        "status": "active",
        "env": settings.ENVIRONMENT,
        "scheduler": settings.SCHEDULER_ENABLED,
    }

app.include_router(players.router, prefix="/api/v1")
app.include_router(seasons.router, prefix="/api/v1")
