# sketchrelay/services/season_service.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from typing import Awaitable, Callable, Optional

from prometheus_client import Counter
from sqlalchemy import select, update, func, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sketchrelay.core.config import settings
from sketchrelay.core.constants import (
    SEASON_ACTIVATION_JOB_PREFIX,
    JOB_TYPE_SEASON_ACTIVATION,
    JOINABLE_SEASON_STATUSES,
    PRE_ACTIVATION_SEASON_STATUSES,
    POST_ACTIVATION_SEASON_STATUSES,
    TERMINAL_SEASON_STATUSES,
    TERMINAL_GAME_STATUSES,
)
from sketchrelay.core.database import AsyncSessionLocal
from sketchrelay.core.enums import SeasonStatus, GameStatus, ActivationTrigger, ErrorKind
from sketchrelay.core.event_hook import publish_event
from sketchrelay.core.exceptions import (
    SketchRelayError,
    MinMaxPlayersError,
    SeasonNotFoundError,
    PlayerNotFoundError,
    CreatorNotFoundError,
    SeasonNotJoinableError,
    SeasonAlreadyActiveError,
    SeasonInvalidStatusError,
    SeasonAlreadyTerminatedError,
    SeasonFullError,
    AlreadyJoinedError,
    MinPlayersNotMetError,
    GameCreationError,
    PersistenceError,
    UnknownError,
)
from sketchrelay.core.notify import send_ntfy_notification
from sketchrelay.models.game import Game
from sketchrelay.models.player import Player
from sketchrelay.models.season import Season, SeasonConfig, PlayersOnSeasons
from sketchrelay.schemas.instruction import MessageInstruction
from sketchrelay.schemas.season import SeasonCreate, SeasonResponse, SeasonConfigResponse
from sketchrelay.services import season_completion_service
from sketchrelay.services.common.duration import parse_duration, format_remaining
from sketchrelay.services.game_factory import GameFactory
from sketchrelay.services.scheduler_service import SchedulerService
from sketchrelay.services.turn_offering_service import TurnOfferingService

logger = logging.getLogger(__name__)

ACTIVATION_COUNTER = Counter(
    'sketchrelay_season_activations_total',
    'Season activation attempts',
    ['trigger', 'outcome'],
)


def activation_job_id(season_id: str) -> str:
    return f"{SEASON_ACTIVATION_JOB_PREFIX}{season_id}"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class SideEffects:
    """
    트랜잭션 안에서 쌓아두고 commit 이후에만 실행하는 부수효과.
    failure_* 항목은 롤백된 경우에만 실행됩니다.
    """
    events: list[dict] = field(default_factory=list)
    turn_events: list[dict] = field(default_factory=list)
    cancel_jobs: list[str] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)
    failure_events: list[dict] = field(default_factory=list)
    failure_alerts: list[str] = field(default_factory=list)


TransactionWork = Callable[[AsyncSession, SideEffects], Awaitable[MessageInstruction]]


class SeasonService:
    """
    시즌 생명주기 (생성 -> 참가 -> 활성화/취소 -> 완료, 관리자 종료).
    공개 메서드는 예외를 던지지 않고 항상 MessageInstruction을 반환합니다.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        scheduler: Optional[SchedulerService] = None,
        game_factory: Optional[GameFactory] = None,
        turn_offerer: Optional[TurnOfferingService] = None,
        redis_client=None,
    ):
        self.session_factory = session_factory
        self.scheduler = scheduler
        self.game_factory = game_factory or GameFactory()
        self.turn_offerer = turn_offerer or TurnOfferingService()
        self.redis_client = redis_client

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    async def _run_in_transaction(self, operation: str, work: TransactionWork) -> MessageInstruction:
        effects = SideEffects()
        async with self.session_factory() as db:
            try:
                instruction = await work(db, effects)
                await db.commit()
            except SketchRelayError as e:
                await db.rollback()
                if e.benign:
                    logger.info(f"{operation}: {e.message}")
                else:
                    logger.warning(f"⚠️ {operation} failed: {e.message}")
                await self.run_side_effects(effects, committed=False)
                return MessageInstruction.from_error(e)
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"❌ Database error during {operation}: {e}", exc_info=True)
                await self.run_side_effects(effects, committed=False)
                return MessageInstruction.from_error(PersistenceError.from_exception(operation, e))
            except Exception as e:
                await db.rollback()
                logger.error(f"❌ Unexpected error during {operation}: {e}", exc_info=True)
                await self.run_side_effects(effects, committed=False)
                return MessageInstruction.from_error(UnknownError(operation, str(e)))

        await self.run_side_effects(effects)
        return instruction

    async def run_side_effects(self, effects: SideEffects, committed: bool = True):
        """commit(또는 rollback) 이후 부수효과 실행. 각 항목은 best-effort."""
        if committed:
            for job_id in effects.cancel_jobs:
                if self.scheduler is not None:
                    self.scheduler.cancel_job(job_id)
            events, alerts = effects.events, effects.alerts
        else:
            events, alerts = effects.failure_events, effects.failure_alerts

        for event in events:
            await self._publish(event)
        if committed:
            for event in effects.turn_events:
                await self.turn_offerer.notify_turn_offered(self.redis_client, event)
        for message in alerts:
            await self._alert(message)

    async def _publish(self, event: dict):
        if self.redis_client is None:
            return
        try:
            await publish_event(self.redis_client, event)
        except Exception as e:
            logger.error(f"⚠️ Failed to publish event {event.get('type')}: {e}")

    async def _alert(self, message: str):
        try:
            await send_ntfy_notification(message, title="SketchRelay Season Alert", priority="high")
        except Exception as e:
            logger.error(f"⚠️ Failed to send operator alert: {e}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def _lock_season(self, db: AsyncSession, season_id: str) -> Optional[Season]:
        # 외부 조인 없이 시즌 행만 잠금 (Postgres는 outer join에 FOR UPDATE 불가)
        stmt = (
            select(Season)
            .where(Season.id == season_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    async def _count_players(self, db: AsyncSession, season_id: str) -> int:
        stmt = select(func.count()).select_from(PlayersOnSeasons).where(PlayersOnSeasons.season_id == season_id)
        return (await db.execute(stmt)).scalar_one()

    def _to_response(self, season: Season, config: Optional[SeasonConfig], player_count: int) -> dict:
        response = SeasonResponse(
            id=season.id,
            status=season.status,
            creator_id=season.creator_id,
            guild_id=season.guild_id,
            channel_id=season.channel_id,
            created_at=season.created_at,
            completed_at=season.completed_at,
            player_count=player_count,
            config=SeasonConfigResponse.model_validate(config) if config is not None else None,
        )
        return response.model_dump(mode="json")

    def _join_hint(self, season: Season, config: SeasonConfig, player_count: int) -> dict:
        slots_remaining = None
        if config.max_players is not None:
            slots_remaining = max(config.max_players - player_count, 0)

        activation_at = None
        time_remaining = None
        open_duration = parse_duration(config.open_duration)
        if open_duration and season.created_at is not None:
            activation_at = _as_utc(season.created_at) + open_duration
            remaining = activation_at - datetime.now(timezone.utc)
            time_remaining = format_remaining(max(remaining, timedelta(0)))

        return {
            "currentPlayers": player_count,
            "maxPlayers": config.max_players,
            "minPlayers": config.min_players,
            "slotsRemaining": slots_remaining,
            "activationAt": activation_at.isoformat() if activation_at else None,
            "timeRemaining": time_remaining,
        }

    # ------------------------------------------------------------------
    # createSeason
    # ------------------------------------------------------------------

    async def create_season(self, options: SeasonCreate) -> MessageInstruction:
        timer = {}

        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            min_players = options.min_players if options.min_players is not None else settings.DEFAULT_MIN_PLAYERS
            max_players = options.max_players if options.max_players is not None else settings.DEFAULT_MAX_PLAYERS
            if max_players is not None and max_players < min_players:
                raise MinMaxPlayersError(min_players, max_players)

            creator = await db.get(Player, options.creator_player_id)
            if creator is None:
                raise CreatorNotFoundError(options.creator_player_id)

            config = SeasonConfig(
                turn_pattern=options.turn_pattern or settings.DEFAULT_TURN_PATTERN,
                claim_timeout=options.claim_timeout or settings.DEFAULT_CLAIM_TIMEOUT,
                writing_timeout=options.writing_timeout or settings.DEFAULT_WRITING_TIMEOUT,
                writing_warning=options.writing_warning or settings.DEFAULT_WRITING_WARNING,
                drawing_timeout=options.drawing_timeout or settings.DEFAULT_DRAWING_TIMEOUT,
                drawing_warning=options.drawing_warning or settings.DEFAULT_DRAWING_WARNING,
                open_duration=options.open_duration,
                min_players=min_players,
                max_players=max_players,
            )
            db.add(config)
            await db.flush()

            now = datetime.now(timezone.utc)
            season = Season(
                status=SeasonStatus.SETUP,
                creator_id=creator.id,
                config_id=config.id,
                guild_id=options.guild_id,
                channel_id=options.channel_id,
                created_at=now,
            )
            db.add(season)
            await db.flush()

            open_duration = parse_duration(config.open_duration)
            if open_duration:
                timer["season_id"] = season.id
                timer["fire_at"] = now + open_duration

            effects.events.append({
                "type": "season_created",
                "season_id": season.id,
                "creator_id": creator.id,
                "min_players": min_players,
                "max_players": max_players,
                "guild_id": season.guild_id,
                "channel_id": season.channel_id,
            })
            logger.info(f"✅ Season {season.id} created by {creator.id} (min={min_players}, max={max_players})")
            return MessageInstruction.success(
                "season_create_success",
                seasonId=season.id,
                status=season.status.value,
                minPlayers=min_players,
                maxPlayers=max_players,
                openDuration=config.open_duration,
                activationAt=None,
                activationScheduled=False,
            )

        instruction = await self._run_in_transaction("season_create", work)

        if instruction.is_success and timer:
            scheduled = self._schedule_activation(timer["season_id"], timer["fire_at"])
            instruction.data["activationAt"] = timer["fire_at"].isoformat()
            instruction.data["activationScheduled"] = scheduled
        return instruction

    def _schedule_activation(self, season_id: str, fire_at: datetime) -> bool:
        # 예약 실패는 시즌 생성을 실패시키지 않음
        if self.scheduler is None:
            logger.warning(f"⚠️ No scheduler configured. Season {season_id} has no open duration timer.")
            return False
        scheduled = self.scheduler.schedule_job(
            activation_job_id(season_id),
            fire_at,
            self.handle_open_duration_timeout,
            data=season_id,
            job_type=JOB_TYPE_SEASON_ACTIVATION,
        )
        if not scheduled:
            logger.warning(f"⚠️ Failed to schedule activation for season {season_id}. Season stays open until filled.")
        return scheduled

    # ------------------------------------------------------------------
    # findSeasonById / listSeasons
    # ------------------------------------------------------------------

    async def find_season_by_id(self, season_id: str) -> MessageInstruction:
        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            season = await db.get(Season, season_id)
            if season is None:
                raise SeasonNotFoundError(season_id, key="season_not_found")
            config = await db.get(SeasonConfig, season.config_id)
            player_count = await self._count_players(db, season_id)
            return MessageInstruction.success("season_found", season=self._to_response(season, config, player_count))

        return await self._run_in_transaction("season_find", work)

    async def list_seasons(self, status: Optional[SeasonStatus] = None) -> MessageInstruction:
        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            player_counts = (
                select(PlayersOnSeasons.season_id, func.count().label("player_count"))
                .group_by(PlayersOnSeasons.season_id)
                .subquery()
            )
            stmt = (
                select(Season, SeasonConfig, func.coalesce(player_counts.c.player_count, 0))
                .join(SeasonConfig, Season.config_id == SeasonConfig.id)
                .outerjoin(player_counts, player_counts.c.season_id == Season.id)
                .order_by(desc(Season.created_at), Season.id)
            )
            if status is not None:
                stmt = stmt.where(Season.status == status)

            result = await db.execute(stmt)
            seasons = [self._to_response(season, config, count) for season, config, count in result.all()]
            return MessageInstruction.success("season_list_success", seasons=seasons, count=len(seasons))

        return await self._run_in_transaction("season_list", work)

    # ------------------------------------------------------------------
    # addPlayerToSeason
    # ------------------------------------------------------------------

    async def add_player_to_season(self, player_id: str, season_id: str) -> MessageInstruction:
        """
        참가 처리. 정원이 차면 같은 트랜잭션에서 바로 활성화합니다.
        (참가와 활성화는 함께 commit 되거나 함께 롤백됨)
        """
        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            player = await db.get(Player, player_id)
            if player is None:
                raise PlayerNotFoundError(player_id)

            season = await self._lock_season(db, season_id)
            if season is None:
                raise SeasonNotFoundError(season_id, key="season_join_error_season_not_found")
            if season.status not in JOINABLE_SEASON_STATUSES:
                raise SeasonNotJoinableError(season_id, season.status.value)

            config = await db.get(SeasonConfig, season.config_id)
            current_players = await self._count_players(db, season_id)
            if config.max_players is not None and current_players >= config.max_players:
                raise SeasonFullError(season_id, current_players, config.max_players)

            if await db.get(PlayersOnSeasons, (player_id, season_id)) is not None:
                raise AlreadyJoinedError(player_id, season_id)

            db.add(PlayersOnSeasons(player_id=player_id, season_id=season_id))
            try:
                await db.flush()
            except IntegrityError:
                # 동시에 같은 플레이어가 참가한 경우
                raise AlreadyJoinedError(player_id, season_id)

            new_count = await self._count_players(db, season_id)
            logger.info(f"Player {player_id} joined season {season_id} ({new_count}/{config.max_players or '∞'})")
            effects.events.append({
                "type": "season_player_joined",
                "season_id": season_id,
                "player_id": player_id,
                "discord_user_id": player.discord_user_id,
                "player_count": new_count,
            })

            if config.max_players is not None and new_count >= config.max_players:
                logger.info(f"Season {season_id} is full. Activating in the join transaction.")
                instruction = await self.activate_season_in_transaction(
                    db, season_id, ActivationTrigger.MAX_PLAYERS, effects
                )
                instruction.data["joinedPlayerId"] = player_id
                return instruction

            return MessageInstruction.success(
                "season_join_success",
                seasonId=season_id,
                playerId=player_id,
                status=season.status.value,
                **self._join_hint(season, config, new_count),
            )

        return await self._run_in_transaction("season_join", work)

    # ------------------------------------------------------------------
    # activateSeason
    # ------------------------------------------------------------------

    async def activate_season(self, season_id: str, trigger: ActivationTrigger) -> MessageInstruction:
        """자체 트랜잭션을 열어 활성화합니다. (타이머, 관리자 경로)"""
        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            return await self.activate_season_in_transaction(db, season_id, trigger, effects)

        return await self._run_in_transaction("season_activate", work)

    async def activate_season_in_transaction(
        self,
        db: AsyncSession,
        season_id: str,
        trigger: ActivationTrigger,
        effects: SideEffects,
    ) -> MessageInstruction:
        """
        호출 측이 이미 연 트랜잭션 안에서 활성화합니다.
        롤백이 필요한 실패는 SketchRelayError로 던지고, commit해야 하는 결과
        (성공, 타임아웃으로 인한 CANCELLED)는 MessageInstruction으로 반환합니다.
        부수효과는 effects에 쌓이며 commit 이후 호출 측이 run_side_effects로 실행해야 합니다.
        """
        season = await self._lock_season(db, season_id)
        if season is None:
            raise SeasonNotFoundError(season_id, key="season_activate_error_not_found")

        if season.status in POST_ACTIVATION_SEASON_STATUSES:
            ACTIVATION_COUNTER.labels(trigger.value, "already_active").inc()
            raise SeasonAlreadyActiveError(season_id, season.status.value)
        if season.status not in PRE_ACTIVATION_SEASON_STATUSES:
            raise SeasonInvalidStatusError(
                season_id,
                season.status.value,
                expected=[s.value for s in PRE_ACTIVATION_SEASON_STATUSES],
            )

        config = await db.get(SeasonConfig, season.config_id)
        player_count = await self._count_players(db, season_id)

        if player_count < config.min_players:
            if trigger == ActivationTrigger.OPEN_DURATION_TIMEOUT:
                previous_status = season.status
                season.status = SeasonStatus.CANCELLED
                await db.flush()

                ACTIVATION_COUNTER.labels(trigger.value, "cancelled").inc()
                logger.info(
                    f"🚫 Season {season_id} cancelled: {player_count}/{config.min_players} players at open duration timeout"
                )
                effects.events.append({
                    "type": "season_cancelled",
                    "season_id": season_id,
                    "previous_status": previous_status.value,
                    "player_count": player_count,
                    "min_players": config.min_players,
                    "guild_id": season.guild_id,
                    "channel_id": season.channel_id,
                })
                return MessageInstruction.from_error(
                    MinPlayersNotMetError(
                        season_id,
                        player_count,
                        config.min_players,
                        trigger.value,
                        key="season_activate_error_min_players_not_met_on_timeout",
                    )
                )

            ACTIVATION_COUNTER.labels(trigger.value, "min_players_not_met").inc()
            raise MinPlayersNotMetError(season_id, player_count, config.min_players, trigger.value)

        previous_status = season.status
        season.status = SeasonStatus.ACTIVE
        await db.flush()

        creation = await self.game_factory.create_games_for_season(db, season_id)
        if not creation.success:
            ACTIVATION_COUNTER.labels(trigger.value, "game_creation_failed").inc()
            effects.failure_events.append({
                "type": "season_activation_failed",
                "season_id": season_id,
                "trigger": trigger.value,
                "reason": creation.error,
                "guild_id": season.guild_id,
                "channel_id": season.channel_id,
            })
            effects.failure_alerts.append(
                f"Season {season_id} activation ({trigger.value}) rolled back: game creation failed: {creation.error}"
            )
            raise GameCreationError(season_id, creation.error)

        turn_offer_failures = []
        for game, player_id in creation.assignments:
            offer = await self.turn_offerer.offer_initial_turn(db, game, player_id, season_id, config)
            if offer.success:
                effects.turn_events.append(offer.event)
                continue

            turn_offer_failures.append({"gameId": game.id, "playerId": player_id, "error": offer.error})
            effects.events.append({
                "type": "turn_offer_failed",
                "season_id": season_id,
                "game_id": game.id,
                "player_id": player_id,
                "reason": offer.error,
            })

        if turn_offer_failures:
            # 시즌은 ACTIVE로 유지. 턴이 없는 게임은 수동 복구 대상
            logger.error(
                f"❌ Season {season_id}: {len(turn_offer_failures)} initial turn offers failed. Manual recovery needed."
            )
            effects.alerts.append(
                f"Season {season_id} activated with {len(turn_offer_failures)} failed initial turn offers "
                f"(games: {', '.join(f['gameId'] for f in turn_offer_failures)}). Manual recovery needed."
            )

        effects.cancel_jobs.append(activation_job_id(season_id))
        effects.events.append({
            "type": "season_activated",
            "season_id": season_id,
            "trigger": trigger.value,
            "player_count": player_count,
            "games_created": len(creation.assignments),
            "turn_offer_failures": len(turn_offer_failures),
            "guild_id": season.guild_id,
            "channel_id": season.channel_id,
        })

        ACTIVATION_COUNTER.labels(trigger.value, "activated").inc()
        logger.info(
            f"🎬 Season {season_id} activated by {trigger.value}: {player_count} players, "
            f"{len(creation.assignments)} games"
        )
        return MessageInstruction.success(
            "season_activate_success",
            seasonId=season_id,
            status=season.status.value,
            previousStatus=previous_status.value,
            trigger=trigger.value,
            playerCount=player_count,
            gamesCreated=len(creation.assignments),
            turnsOffered=len(creation.assignments) - len(turn_offer_failures),
            turnOfferFailures=turn_offer_failures,
        )

    async def handle_open_duration_timeout(self, season_id: str) -> Optional[MessageInstruction]:
        """
        스케줄러 콜백. 모집 기간이 끝난 시즌을 활성화(또는 취소)합니다.
        어떤 예외도 스케줄러로 전파하지 않습니다.
        """
        trigger = ActivationTrigger.OPEN_DURATION_TIMEOUT
        logger.info(f"⏳ Open duration elapsed for season {season_id}")
        try:
            result = await self.activate_season(season_id, trigger)
        except Exception as e:
            logger.error(f"❌ Open duration timeout handling failed for season {season_id}: {e}", exc_info=True)
            await self._notify_activation_failure(season_id, trigger, str(e))
            return None

        if result.is_error and result.error_kind in (ErrorKind.PERSISTENCE, ErrorKind.UNKNOWN):
            await self._notify_activation_failure(season_id, trigger, result.data.get("message"))
        return result

    async def _notify_activation_failure(self, season_id: str, trigger: ActivationTrigger, reason: Optional[str]):
        await self._publish({
            "type": "season_activation_failed",
            "season_id": season_id,
            "trigger": trigger.value,
            "reason": reason,
        })
        await self._alert(f"Season {season_id} activation ({trigger.value}) failed: {reason}")

    # ------------------------------------------------------------------
    # terminateSeason
    # ------------------------------------------------------------------

    async def terminate_season(self, season_id: str) -> MessageInstruction:
        """관리자 강제 종료. 끝나지 않은 게임도 함께 TERMINATED 처리."""
        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            season = await self._lock_season(db, season_id)
            if season is None:
                raise SeasonNotFoundError(season_id, key="season_terminate_error_not_found")
            if season.status == SeasonStatus.TERMINATED:
                raise SeasonAlreadyTerminatedError(season_id)
            if season.status in TERMINAL_SEASON_STATUSES:
                raise SeasonInvalidStatusError(
                    season_id,
                    season.status.value,
                    expected=[s.value for s in SeasonStatus if s not in TERMINAL_SEASON_STATUSES],
                    key="season_terminate_error_invalid_status",
                )

            previous_status = season.status
            player_count = await self._count_players(db, season_id)
            game_count = (
                await db.execute(select(func.count()).select_from(Game).where(Game.season_id == season_id))
            ).scalar_one()

            await db.execute(
                update(Game)
                .where(Game.season_id == season_id, Game.status.notin_(TERMINAL_GAME_STATUSES))
                .values(status=GameStatus.TERMINATED)
            )
            season.status = SeasonStatus.TERMINATED
            await db.flush()

            effects.cancel_jobs.append(activation_job_id(season_id))
            effects.events.append({
                "type": "season_terminated",
                "season_id": season_id,
                "previous_status": previous_status.value,
                "player_count": player_count,
                "game_count": game_count,
                "guild_id": season.guild_id,
                "channel_id": season.channel_id,
            })
            logger.info(f"🛑 Season {season_id} terminated (was {previous_status.value}, {game_count} games)")
            return MessageInstruction.success(
                "season_terminate_success",
                seasonId=season_id,
                previousStatus=previous_status.value,
                playerCount=player_count,
                gameCount=game_count,
            )

        return await self._run_in_transaction("season_terminate", work)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def check_season_completion(self, season_id: str) -> MessageInstruction:
        """ACTIVE 시즌의 모든 게임이 COMPLETED면 시즌을 COMPLETED로 전환합니다."""
        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            season = await self._lock_season(db, season_id)
            if season is None:
                raise SeasonNotFoundError(season_id, key="season_completion_error_not_found")
            if season.status != SeasonStatus.ACTIVE:
                return MessageInstruction.info(
                    "season_completion_not_active", seasonId=season_id, status=season.status.value
                )

            result = await db.execute(select(Game.status).where(Game.season_id == season_id))
            statuses = list(result.scalars().all())
            completed = sum(1 for s in statuses if s == GameStatus.COMPLETED)
            if not statuses or completed < len(statuses):
                return MessageInstruction.info(
                    "season_completion_not_ready",
                    seasonId=season_id,
                    completedGames=completed,
                    totalGames=len(statuses),
                )

            season.status = SeasonStatus.COMPLETED
            season.completed_at = datetime.now(timezone.utc)
            await db.flush()

            effects.events.append({
                "type": "season_completed",
                "season_id": season_id,
                "total_games": len(statuses),
                "guild_id": season.guild_id,
                "channel_id": season.channel_id,
            })
            logger.info(f"🎉 Season {season_id} completed ({len(statuses)} games)")
            return MessageInstruction.success(
                "season_completion_completed",
                seasonId=season_id,
                totalGames=len(statuses),
                completedAt=season.completed_at.isoformat(),
            )

        return await self._run_in_transaction("season_completion", work)

    async def list_active_season_ids(self) -> list[str]:
        async with self.session_factory() as db:
            result = await db.execute(select(Season.id).where(Season.status == SeasonStatus.ACTIVE))
            return list(result.scalars().all())

    async def get_season_completion_results(self, season_id: str) -> MessageInstruction:
        async def work(db: AsyncSession, effects: SideEffects) -> MessageInstruction:
            results = await season_completion_service.get_season_completion_results(db, season_id)
            if results is None:
                raise SeasonNotFoundError(season_id, key="season_results_error_not_found")
            return MessageInstruction.success("season_results_success", **results.model_dump(mode="json"))

        return await self._run_in_transaction("season_results", work)

    def create_season_completion_announcement(self, results) -> MessageInstruction:
        return season_completion_service.create_season_completion_announcement(results)

    async def deliver_season_completion_announcement(self, season_id: str) -> Optional[MessageInstruction]:
        async with self.session_factory() as db:
            try:
                return await season_completion_service.deliver_season_completion_announcement(db, season_id)
            except SQLAlchemyError as e:
                logger.error(f"❌ Failed to build completion announcement for season {season_id}: {e}", exc_info=True)
                return MessageInstruction.from_error(PersistenceError.from_exception("season_announcement", e))
