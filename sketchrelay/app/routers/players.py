from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sketchrelay.core.database import get_db
from sketchrelay.schemas.player import PlayerCreate, PlayerResponse
from sketchrelay.services.player_service import get_or_create_player

router = APIRouter(prefix="/players", tags=["players"])

@router.post("", response_model=PlayerResponse)
async def upsert_player(player_in: PlayerCreate, db: AsyncSession = Depends(get_db)):
    """
    Discord 사용자로 플레이어를 조회하거나 생성합니다. (첫 상호작용 시 lazy 생성)
    """
    player = await get_or_create_player(db, player_in.discord_user_id, player_in.name)
    await db.commit()
    await db.refresh(player)
    return player
