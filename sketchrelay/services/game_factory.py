# sketchrelay/services/game_factory.py
import logging
from dataclasses import dataclass, field
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sketchrelay.core.enums import GameStatus
from sketchrelay.models.season import Season, PlayersOnSeasons
from sketchrelay.models.game import Game

logger = logging.getLogger(__name__)


@dataclass
class GameCreationResult:
    success: bool
    # (게임, 해당 게임의 첫 턴을 받을 player_id)
    assignments: list[tuple[Game, str]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def games(self) -> list[Game]:
        return [game for game, _ in self.assignments]


class GameFactory:
    """시즌 활성화 시 명부의 플레이어마다 게임을 하나씩 생성합니다."""

    async def create_games_for_season(self, db: AsyncSession, season_id: str) -> GameCreationResult:
        # 호출 측 트랜잭션 안에서만 동작 (commit 하지 않음)
        try:
            season = await db.get(Season, season_id)
            if season is None:
                return GameCreationResult(success=False, error=f"Season {season_id} not found")

            stmt = (
                select(PlayersOnSeasons.player_id)
                .where(PlayersOnSeasons.season_id == season_id)
                .order_by(PlayersOnSeasons.joined_at, PlayersOnSeasons.player_id)
            )
            result = await db.execute(stmt)
            player_ids = list(result.scalars().all())

            assignments = []
            for player_id in player_ids:
                game = Game(
                    season_id=season_id,
                    status=GameStatus.ACTIVE,
                    creator_id=season.creator_id,
                    config_id=season.config_id,
                )
                db.add(game)
                assignments.append((game, player_id))

            await db.flush()
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to create games for season {season_id}: {e}", exc_info=True)
            return GameCreationResult(success=False, error=str(e))

        logger.info(f"Created {len(assignments)} games for season {season_id}")
        return GameCreationResult(success=True, assignments=assignments)
