from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict
from sketchrelay.core.enums import SeasonStatus, GameStatus, TurnType, TurnStatus, ActivationTrigger


class SeasonCreate(BaseModel):
    """
    createSeason 입력값. 명령 레이어에서 이미 검증된 값이 들어온다고 가정합니다.
    비어있는 설정값은 settings.DEFAULT_* 로 채워집니다.
    """
    creator_player_id: str
    turn_pattern: Optional[str] = None
    claim_timeout: Optional[str] = None
    writing_timeout: Optional[str] = None
    writing_warning: Optional[str] = None
    drawing_timeout: Optional[str] = None
    drawing_warning: Optional[str] = None
    open_duration: Optional[str] = None
    min_players: Optional[int] = Field(default=None, ge=1)
    max_players: Optional[int] = Field(default=None, ge=1)
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None


class SeasonConfigResponse(BaseModel):
    turn_pattern: str
    claim_timeout: str
    writing_timeout: str
    writing_warning: str
    drawing_timeout: str
    drawing_warning: str
    open_duration: Optional[str] = None
    min_players: int
    max_players: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class SeasonResponse(BaseModel):
    id: str
    status: SeasonStatus
    creator_id: str
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    player_count: int = 0
    config: Optional[SeasonConfigResponse] = None

    model_config = ConfigDict(from_attributes=True)


# --- Completion Report ---

class TurnResult(BaseModel):
    turn_number: int
    type: TurnType
    status: TurnStatus
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    text_content: Optional[str] = None
    image_url: Optional[str] = None


class GameResult(BaseModel):
    game_id: str
    status: GameStatus
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    turns: List[TurnResult] = Field(default_factory=list)


class SeasonCompletionResults(BaseModel):
    season_id: str
    status: SeasonStatus
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    days_elapsed: int = 0
    total_games: int = 0
    total_players: int = 0
    total_turns: int = 0
    completed_turns: int = 0
    skipped_turns: int = 0
    completion_percentage: int = 0
    games: List[GameResult] = Field(default_factory=list)


class SeasonJoin(BaseModel):
    player_id: str


class SeasonActivate(BaseModel):
    trigger: ActivationTrigger = ActivationTrigger.ADMIN
