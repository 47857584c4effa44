import redis.asyncio as async_redis
from sketchrelay.core.config import settings


def create_redis() -> async_redis.Redis:
    return async_redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        decode_responses=True
    )
