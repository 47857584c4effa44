# sketchrelay/services/season_completion_service.py
import logging
import math
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sketchrelay.core.constants import (
    PROGRESS_BAR_LENGTH,
    PROGRESS_BAR_FILLED,
    PROGRESS_BAR_EMPTY,
    DRAWING_PLACEHOLDER,
    SKIPPED_PLACEHOLDER,
    REPORTED_TURN_STATUSES,
)
from sketchrelay.core.enums import SeasonStatus, TurnStatus, TurnType
from sketchrelay.models.game import Game, Turn
from sketchrelay.models.player import Player
from sketchrelay.models.season import Season, PlayersOnSeasons
from sketchrelay.schemas.instruction import MessageInstruction, InstructionFormatting, InstructionContext
from sketchrelay.schemas.season import SeasonCompletionResults, GameResult, TurnResult

logger = logging.getLogger(__name__)

ANNOUNCEMENT_KEY = "season_completion_announcement"
ANNOUNCEMENT_FALLBACK_KEY = "season_completion_announcement_fallback"


def round_half_up(value: float) -> int:
    # 파이썬 round()는 banker's rounding 이므로 사용하지 않음
    return int(math.floor(value + 0.5))


def completion_percentage(completed_turns: int, total_turns: int) -> int:
    if total_turns <= 0:
        return 0
    return round_half_up(completed_turns / total_turns * 100)


def render_progress_bar(percentage: int) -> str:
    percentage = max(0, min(100, percentage))
    filled = round_half_up(percentage / 100 * PROGRESS_BAR_LENGTH)
    return PROGRESS_BAR_FILLED * filled + PROGRESS_BAR_EMPTY * (PROGRESS_BAR_LENGTH - filled)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite는 tz 정보 없이 돌려줌
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _days_elapsed(created_at: Optional[datetime], completed_at: Optional[datetime]) -> int:
    if created_at is None or completed_at is None:
        return 0
    seconds = (_as_utc(completed_at) - _as_utc(created_at)).total_seconds()
    return max(1, math.ceil(seconds / 86400))


async def get_season_completion_results(db: AsyncSession, season_id: str) -> Optional[SeasonCompletionResults]:
    """
    완료된 시즌의 게임/턴을 모아 리포트를 만듭니다. (읽기 전용)
    시즌이 없거나 COMPLETED가 아니면 None.
    """
    stmt = (
        select(Season)
        .where(Season.id == season_id)
        .options(
            selectinload(Season.creator),
            selectinload(Season.games).selectinload(Game.turns).selectinload(Turn.player),
        )
    )
    result = await db.execute(stmt)
    season = result.scalars().first()
    if season is None or season.status != SeasonStatus.COMPLETED:
        return None

    player_count = (
        await db.execute(
            select(func.count()).select_from(PlayersOnSeasons).where(PlayersOnSeasons.season_id == season_id)
        )
    ).scalar_one()

    games = sorted(season.games, key=lambda g: (_as_utc(g.created_at), g.id))
    total_turns = 0
    completed_turns = 0
    skipped_turns = 0
    game_results = []

    for game in games:
        turns = sorted(game.turns, key=lambda t: t.turn_number)
        total_turns += len(turns)
        completed_turns += sum(1 for t in turns if t.status == TurnStatus.COMPLETED)
        skipped_turns += sum(1 for t in turns if t.status == TurnStatus.SKIPPED)

        game_results.append(
            GameResult(
                game_id=game.id,
                status=game.status,
                created_at=game.created_at,
                completed_at=game.completed_at,
                turns=[
                    TurnResult(
                        turn_number=t.turn_number,
                        type=t.type,
                        status=t.status,
                        player_id=t.player_id,
                        player_name=t.player.name if t.player else None,
                        text_content=t.text_content,
                        image_url=t.image_url,
                    )
                    for t in turns
                    if t.status in REPORTED_TURN_STATUSES
                ],
            )
        )

    return SeasonCompletionResults(
        season_id=season.id,
        status=season.status,
        creator_name=season.creator.name if season.creator else None,
        created_at=season.created_at,
        completed_at=season.completed_at,
        days_elapsed=_days_elapsed(season.created_at, season.completed_at),
        total_games=len(games),
        total_players=player_count,
        total_turns=total_turns,
        completed_turns=completed_turns,
        skipped_turns=skipped_turns,
        completion_percentage=completion_percentage(completed_turns, total_turns),
        games=game_results,
    )


def _render_turn(turn: TurnResult) -> str:
    author = turn.player_name or "unknown"
    if turn.status == TurnStatus.SKIPPED:
        return f"{turn.turn_number}. {SKIPPED_PLACEHOLDER} ({author})"
    if turn.type == TurnType.WRITING:
        return f"{turn.turn_number}. \"{turn.text_content or ''}\" - {author}"
    return f"{turn.turn_number}. {DRAWING_PLACEHOLDER} - {author}"


def _render_games(results: SeasonCompletionResults) -> str:
    blocks = []
    for index, game in enumerate(results.games, start=1):
        lines = [f"**Game {index}**"]
        lines.extend(_render_turn(turn) for turn in game.turns)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _announcement_data(results: SeasonCompletionResults, progress_bar: str, game_results: str) -> dict:
    return {
        "seasonId": results.season_id,
        "daysElapsed": results.days_elapsed,
        "progressBar": progress_bar,
        "completionPercentage": results.completion_percentage,
        "totalGames": results.total_games,
        "totalPlayers": results.total_players,
        "totalTurns": results.total_turns,
        "completedTurns": results.completed_turns,
        "skippedTurns": results.skipped_turns,
        "creatorName": results.creator_name,
        "gameResults": game_results,
    }


def create_season_completion_announcement(results: SeasonCompletionResults) -> MessageInstruction:
    """
    완료 공지 메시지 데이터 생성 (순수 함수).
    렌더링 중 에러가 나도 같은 키 구성의 최소 공지를 반환합니다.
    """
    try:
        progress_bar = render_progress_bar(results.completion_percentage)
        return MessageInstruction.success(
            ANNOUNCEMENT_KEY,
            **_announcement_data(results, progress_bar, _render_games(results)),
        )
    except Exception as e:
        logger.error(f"⚠️ Failed to render completion announcement for season {results.season_id}: {e}", exc_info=True)
        return MessageInstruction.success(
            ANNOUNCEMENT_FALLBACK_KEY,
            **_announcement_data(results, PROGRESS_BAR_EMPTY * PROGRESS_BAR_LENGTH, ""),
        )


async def deliver_season_completion_announcement(db: AsyncSession, season_id: str) -> Optional[MessageInstruction]:
    """
    완료 공지에 전송 대상을 붙여 반환합니다.
    시즌이 생성된 채널이 있으면 그 채널로, 없으면 참가자 전원에게 DM.
    """
    results = await get_season_completion_results(db, season_id)
    if results is None:
        logger.info(f"Season {season_id} missing or not completed. No announcement.")
        return None

    season = await db.get(Season, season_id)
    instruction = create_season_completion_announcement(results)

    if season.channel_id:
        instruction.formatting = InstructionFormatting(channel=season.channel_id)
        instruction.context = InstructionContext(guild_id=season.guild_id)
    else:
        stmt = (
            select(Player.discord_user_id)
            .join(PlayersOnSeasons, PlayersOnSeasons.player_id == Player.id)
            .where(PlayersOnSeasons.season_id == season_id)
            .order_by(PlayersOnSeasons.joined_at, Player.id)
        )
        recipients = list((await db.execute(stmt)).scalars().all())
        instruction.formatting = InstructionFormatting(dm=True)
        instruction.context = InstructionContext(guild_id=season.guild_id, recipients=recipients)

    return instruction
