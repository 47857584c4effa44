from sketchrelay.core.enums import SeasonStatus, GameStatus, TurnStatus

# --- Scheduler ---
SEASON_ACTIVATION_JOB_PREFIX = "season-activation-"
JOB_TYPE_SEASON_ACTIVATION = "season-activation"
JOB_TYPE_GENERIC = "generic"

# --- Season Lifecycle ---
JOINABLE_SEASON_STATUSES = (SeasonStatus.SETUP, SeasonStatus.PENDING_START, SeasonStatus.OPEN)
PRE_ACTIVATION_SEASON_STATUSES = JOINABLE_SEASON_STATUSES
# 이미 활성화됐거나 끝난 상태 -> 활성화 재시도는 무해한 no-op
POST_ACTIVATION_SEASON_STATUSES = (
    SeasonStatus.ACTIVE,
    SeasonStatus.COMPLETED,
    SeasonStatus.CANCELLED,
    SeasonStatus.TERMINATED,
)
TERMINAL_SEASON_STATUSES = (SeasonStatus.COMPLETED, SeasonStatus.TERMINATED)
TERMINAL_GAME_STATUSES = (GameStatus.COMPLETED, GameStatus.TERMINATED)
REPORTED_TURN_STATUSES = (TurnStatus.COMPLETED, TurnStatus.SKIPPED)

# --- Redis Channels ---
REDIS_CHANNEL_SEASON_EVENTS = "season_events"
REDIS_CHANNEL_TURN_EVENTS = "turn_events"

# --- Completion Announcement ---
PROGRESS_BAR_LENGTH = 50
PROGRESS_BAR_FILLED = "█"
PROGRESS_BAR_EMPTY = "░"
DRAWING_PLACEHOLDER = "🖼️ [drawing]"
SKIPPED_PLACEHOLDER = "⏭️ _skipped_"

# --- Message Templates ---
REDIS_PREFIX_TEMPLATE = "config:msg_template:"

DEFAULT_TEMPLATES = {
	"season_activated": "🎬 시즌 **{season_id}** 시작! 플레이어 {player_count}명, 게임 {games_created}개가 생성되었습니다.",
	"season_cancelled": "🚫 시즌 **{season_id}** 모집 종료: 최소 인원 미달 ({player_count}/{min_players})",
	"season_terminated": "🛑 시즌 **{season_id}** 이(가) 관리자에 의해 종료되었습니다. (이전 상태: {previous_status})",
	"season_activation_failed": "⚠️ 시즌 **{season_id}** 활성화 실패: {reason}",
	"turn_offered": "✏️ <@{discord_user_id}> 새 턴이 도착했습니다! (게임 {game_id}, {turn_type})",
	"season_completed": (
		"🎉 **{season_id}** COMPLETED\n"
		"Day {days_elapsed} {progress_bar} {completion_percentage}%\n"
		"Games: {total_games} / Players: {total_players} / Turns: {completed_turns}/{total_turns}\n"
		"{game_results}"
	),
}
