from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class PlayerCreate(BaseModel):
    discord_user_id: str
    name: str


class PlayerResponse(BaseModel):
    id: str
    discord_user_id: str
    name: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
