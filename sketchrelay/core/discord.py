import logging
import httpx
from sketchrelay.core.config import settings

logger = logging.getLogger(__name__)

async def send_discord_webhook(message: str) -> bool:
    """
    Discord 웹훅으로 메시지를 전송합니다.
    설정에 웹훅이 없으면 조용히 무시합니다. (전송 여부를 반환)
    """
    url = settings.DISCORD_ALERTS_WEBHOOK_URL
    if not url:
        return False
    payload = {"content": message}
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
        return True
    except Exception as e:
        logger.error(f"Failed to send Discord webhook: {e}")
        return False
