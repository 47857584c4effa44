import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sketchrelay.core.database import Base
from sketchrelay.core.enums import SeasonStatus

class SeasonConfig(Base):
    __tablename__ = "season_configs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    turn_pattern = Column(String(200), nullable=False)  # e.g. "writing,drawing"
    claim_timeout = Column(String(20), nullable=False)
    writing_timeout = Column(String(20), nullable=False)
    writing_warning = Column(String(20), nullable=False)
    drawing_timeout = Column(String(20), nullable=False)
    drawing_warning = Column(String(20), nullable=False)
    open_duration = Column(String(20), nullable=True)  # 없으면 모집 마감 타이머 없음
    min_players = Column(Integer, nullable=False)
    max_players = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class Season(Base):
    __tablename__ = "seasons"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    status = Column(Enum(SeasonStatus), nullable=False, default=SeasonStatus.SETUP)
    creator_id = Column(String(36), ForeignKey("players.id"), nullable=False)
    config_id = Column(String(36), ForeignKey("season_configs.id"), nullable=False, unique=True)

    # 시즌이 만들어진 곳 (Discord guild/channel). 없으면 완료 공지는 참가자 개별 전송
    guild_id = Column(String(32), nullable=True)
    channel_id = Column(String(32), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    config = relationship("SeasonConfig")
    creator = relationship("Player")
    players = relationship("PlayersOnSeasons", back_populates="season")
    games = relationship("Game", back_populates="season")

class PlayersOnSeasons(Base):
    """시즌 참가 명부 (roster). 생성 후 수정되지 않음."""
    __tablename__ = "players_on_seasons"

    player_id = Column(String(36), ForeignKey("players.id"), primary_key=True)
    season_id = Column(String(36), ForeignKey("seasons.id"), primary_key=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    season = relationship("Season", back_populates="players")
    player = relationship("Player")
