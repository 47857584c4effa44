import logging
from string import Formatter
from typing import Optional
import redis.asyncio as async_redis
from sketchrelay.core import constants

logger = logging.getLogger(__name__)


class _TemplateData(dict):
    # 모르는 placeholder는 그대로 남겨둠 ({unknown} -> "{unknown}")
    def __missing__(self, key):
        return "{" + key + "}"


def safe_format(template: str, data: dict) -> str:
    """운영자가 Redis에서 고친 템플릿이 깨져 있어도 알림은 나가야 함"""
    values = _TemplateData((k, "" if v is None else v) for k, v in data.items())
    try:
        return Formatter().vformat(template, (), values)
    except (ValueError, IndexError, AttributeError, TypeError) as e:
        logger.warning(f"⚠️ Malformed message template, sending raw: {e}")
        return template


async def get_message_template(redis_client: Optional[async_redis.Redis], key: str) -> str:
    """config:msg_template:<key> 오버라이드 -> 없으면 기본 템플릿"""
    if key not in constants.DEFAULT_TEMPLATES:
        raise KeyError(f"Unknown template key: {key}")
    if redis_client is not None:
        try:
            override = await redis_client.get(constants.REDIS_PREFIX_TEMPLATE + key)
            if isinstance(override, bytes):
                override = override.decode()
            if override:
                return override
        except Exception as e:
            logger.error(f"Failed to fetch template override {key}: {e}")
    return constants.DEFAULT_TEMPLATES[key]


async def render_message(redis_client: Optional[async_redis.Redis], key: str, data: dict) -> str:
    return safe_format(await get_message_template(redis_client, key), data)
