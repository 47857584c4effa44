import json
from sketchrelay.core.constants import REDIS_CHANNEL_SEASON_EVENTS, REDIS_CHANNEL_TURN_EVENTS

# Redis Pub/Sub 기반 도메인 이벤트 발행 (공통)
async def publish_event(redis_client, event: dict, channel: str = None):
    if channel is None:
        # 이벤트 타입에 따라 기본 채널 지정
        event_type = event.get("type") or ""
        channel = REDIS_CHANNEL_TURN_EVENTS if event_type.startswith("turn_") else REDIS_CHANNEL_SEASON_EVENTS
    await redis_client.publish(channel, json.dumps(event, default=str))
