# sketchrelay/services/turn_offering_service.py
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sketchrelay.core.enums import TurnStatus, TurnType
from sketchrelay.core.event_hook import publish_event
from sketchrelay.models.game import Game, Turn
from sketchrelay.models.player import Player
from sketchrelay.models.season import SeasonConfig
from sketchrelay.services.common.duration import parse_duration

logger = logging.getLogger(__name__)


@dataclass
class TurnOfferResult:
    success: bool
    turn: Optional[Turn] = None
    event: Optional[dict] = None  # commit 후 발행할 turn_offered 이벤트
    error: Optional[str] = None


def first_turn_type(turn_pattern: str) -> TurnType:
    """turn_pattern ("writing,drawing") 의 첫 단계"""
    first = (turn_pattern or "").split(",")[0].strip().upper()
    return TurnType(first)


class TurnOfferingService:
    async def offer_initial_turn(
        self,
        db: AsyncSession,
        game: Game,
        player_id: str,
        season_id: str,
        config: SeasonConfig,
    ) -> TurnOfferResult:
        """
        게임의 첫 턴(turn_number=1)을 OFFERED 상태로 생성합니다.
        SAVEPOINT 안에서 실행되므로 실패해도 바깥 트랜잭션(다른 플레이어의 턴)은 유지됩니다.
        알림은 여기서 보내지 않고 이벤트만 만들어 돌려줍니다.
        """
        now = datetime.now(timezone.utc)
        try:
            turn_type = first_turn_type(config.turn_pattern)
            claim_timeout = parse_duration(config.claim_timeout)

            async with db.begin_nested():
                player = await db.get(Player, player_id)
                if player is None:
                    raise ValueError(f"Player {player_id} not found")

                turn = Turn(
                    game_id=game.id,
                    turn_number=1,
                    type=turn_type,
                    status=TurnStatus.OFFERED,
                    player_id=player_id,
                    offered_at=now,
                    claim_deadline=now + claim_timeout if claim_timeout else None,
                )
                db.add(turn)
                await db.flush()
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"❌ Failed to offer initial turn (season={season_id}, game={game.id}, player={player_id}): {e}")
            return TurnOfferResult(success=False, error=str(e))

        event = {
            "type": "turn_offered",
            "season_id": season_id,
            "game_id": game.id,
            "turn_id": turn.id,
            "turn_type": turn_type.value,
            "player_id": player_id,
            "discord_user_id": player.discord_user_id,
            "claim_deadline": turn.claim_deadline.isoformat() if turn.claim_deadline else None,
        }
        return TurnOfferResult(success=True, turn=turn, event=event)

    async def notify_turn_offered(self, redis_client, event: dict) -> bool:
        # 알림 실패는 턴을 되돌리지 않음 (턴 레코드가 기준)
        if redis_client is None:
            return False
        try:
            await publish_event(redis_client, event)
            return True
        except Exception as e:
            logger.error(f"⚠️ Failed to notify offered turn {event.get('turn_id')}: {e}")
            return False
