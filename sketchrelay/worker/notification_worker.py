import asyncio
import json
import logging
import redis.asyncio as async_redis
from sketchrelay.core.cache import create_redis
from sketchrelay.core.constants import REDIS_CHANNEL_SEASON_EVENTS, REDIS_CHANNEL_TURN_EVENTS
from sketchrelay.core.discord import send_discord_webhook
from sketchrelay.core.notify import send_ntfy_notification
from sketchrelay.schemas.instruction import MessageInstruction
from sketchrelay.services.common.templates import get_message_template, render_message, safe_format
from sketchrelay.services.season_service import SeasonService

logger = logging.getLogger(__name__)

# 이벤트 타입 -> 템플릿 키 (단순 치환으로 끝나는 것들)
SIMPLE_SEASON_EVENTS = {
    "season_activated": "season_activated",
    "season_cancelled": "season_cancelled",
    "season_terminated": "season_terminated",
}


def render_completion_announcement(template: str, instruction: MessageInstruction) -> str:
    data = instruction.data
    message = safe_format(template, {
        "season_id": data.get("seasonId"),
        "days_elapsed": data.get("daysElapsed"),
        "progress_bar": data.get("progressBar"),
        "completion_percentage": data.get("completionPercentage"),
        "total_games": data.get("totalGames"),
        "total_players": data.get("totalPlayers"),
        "completed_turns": data.get("completedTurns"),
        "total_turns": data.get("totalTurns"),
        "game_results": data.get("gameResults") or "",
    })
    # 채널이 없는 시즌은 참가자 멘션으로 대신함 (웹훅은 DM 불가)
    if instruction.formatting and instruction.formatting.dm and instruction.context:
        mentions = " ".join(f"<@{r}>" for r in instruction.context.recipients)
        if mentions:
            message = f"{mentions}\n{message}"
    return message


async def _handle_season_event(event: dict, redis: async_redis.Redis, season_service: SeasonService):
    try:
        etype = event.get("type")
        if etype in SIMPLE_SEASON_EVENTS:
            await send_discord_webhook(await render_message(redis, SIMPLE_SEASON_EVENTS[etype], event))
        elif etype == "season_activation_failed":
            msg = await render_message(redis, "season_activation_failed", event)
            await send_discord_webhook(msg)
            await send_ntfy_notification(msg, title="Season Activation Failed", priority="high")
        elif etype == "season_completed":
            instruction = await season_service.deliver_season_completion_announcement(event.get("season_id"))
            if instruction is None or instruction.is_error:
                logger.warning(f"No completion announcement for season {event.get('season_id')}")
                return
            template = await get_message_template(redis, "season_completed")
            await send_discord_webhook(render_completion_announcement(template, instruction))
    except Exception as e:
        logger.error(f"Error handling season event: {e}")


async def _handle_turn_event(event: dict, redis: async_redis.Redis):
    try:
        etype = event.get("type")
        if etype == "turn_offered":
            await send_discord_webhook(await render_message(redis, "turn_offered", event))
        elif etype == "turn_offer_failed":
            await send_ntfy_notification(
                f"Initial turn offer failed (season={event.get('season_id')}, game={event.get('game_id')}): {event.get('reason')}",
                title="Turn Offer Failed",
                priority="high",
            )
    except Exception as e:
        logger.error(f"Error handling turn event: {e}")


async def notification_worker():
    redis = create_redis()
    season_service = SeasonService()
    pubsub = redis.pubsub()
    await pubsub.subscribe(REDIS_CHANNEL_SEASON_EVENTS, REDIS_CHANNEL_TURN_EVENTS)
    logger.info("NotificationWorker: Subscribed to season/turn events…")
    try:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                event = json.loads(message.get("data"))
            except (TypeError, ValueError):
                continue
            channel = message.get("channel")
            if channel == REDIS_CHANNEL_SEASON_EVENTS:
                await _handle_season_event(event, redis, season_service)
            elif channel == REDIS_CHANNEL_TURN_EVENTS:
                await _handle_turn_event(event, redis)
    finally:
        await pubsub.close()
        await redis.aclose()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(notification_worker())
