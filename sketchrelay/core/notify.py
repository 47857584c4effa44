import logging
import httpx
from sketchrelay.core.config import settings

logger = logging.getLogger(__name__)

async def send_ntfy_notification(message: str, title: str = "SketchRelay Alert", priority: str = "default"):
    """
    ntfy를 통해 운영자 알림을 전송합니다.
    :param message: 알림 본문
    :param title: 알림 제목
    :param priority: 알림 우선순위 (max, high, default, low, min)
    """
    if not settings.NTFY_ENABLED or not settings.NTFY_TOPIC:
        return

    url = f"{settings.NTFY_URL}/{settings.NTFY_TOPIC}"
    headers = {
        "Title": title,
        "Priority": priority,
        "Tags": "warning" if priority in ["high", "max"] else "information_source"
    }

    try:
        async with httpx.AsyncClient() as client:
            await client.post(url, data=message.encode("utf-8"), headers=headers)
    except Exception as e:
        logger.error(f"Failed to send ntfy notification: {e}")
