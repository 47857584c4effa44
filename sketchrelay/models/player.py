# sketchrelay/models/player.py
import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sketchrelay.core.database import Base

class Player(Base):
    __tablename__ = "players"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    discord_user_id = Column(String(32), unique=True, nullable=False, index=True)  # 외부(Discord) 식별자
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
