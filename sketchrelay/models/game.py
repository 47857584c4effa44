import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sketchrelay.core.database import Base
from sketchrelay.core.enums import GameStatus, TurnType, TurnStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Game(Base):
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    season_id = Column(String(36), ForeignKey("seasons.id"), nullable=True, index=True)  # 시즌 외 게임은 NULL
    status = Column(Enum(GameStatus), nullable=False, default=GameStatus.SETUP)
    creator_id = Column(String(36), ForeignKey("players.id"), nullable=False)
    config_id = Column(String(36), ForeignKey("season_configs.id"), nullable=True)

    # 같은 트랜잭션에서 만들어진 게임끼리도 생성 순서가 구분되도록 애플리케이션 시각 사용
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    season = relationship("Season", back_populates="games")
    turns = relationship("Turn", back_populates="game", order_by="Turn.turn_number")

class Turn(Base):
    __tablename__ = "turns"
    __table_args__ = (UniqueConstraint("game_id", "turn_number", name="uq_turn_game_number"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    turn_number = Column(Integer, nullable=False)
    type = Column(Enum(TurnType), nullable=False)
    status = Column(Enum(TurnStatus), nullable=False, default=TurnStatus.OFFERED)
    player_id = Column(String(36), ForeignKey("players.id"), nullable=True)

    text_content = Column(Text, nullable=True)   # WRITING 결과
    image_url = Column(String(500), nullable=True)  # DRAWING 결과

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    offered_at = Column(DateTime(timezone=True), nullable=True)
    claim_deadline = Column(DateTime(timezone=True), nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    skipped_at = Column(DateTime(timezone=True), nullable=True)

    game = relationship("Game", back_populates="turns")
    player = relationship("Player")
