from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sketchrelay.models.player import Player


async def get_player(db: AsyncSession, player_id: str) -> Optional[Player]:
    return await db.get(Player, player_id)


async def get_or_create_player(db: AsyncSession, discord_user_id: str, name: str) -> Player:
    """
    외부(Discord) 식별자로 플레이어를 찾고, 없으면 생성합니다.
    표시 이름이 바뀌었으면 갱신합니다. (commit은 호출 측 책임)
    """
    stmt = select(Player).where(Player.discord_user_id == discord_user_id)
    result = await db.execute(stmt)
    player = result.scalars().first()

    if player is None:
        player = Player(discord_user_id=discord_user_id, name=name)
        db.add(player)
        await db.flush()
    elif name and player.name != name:
        player.name = name

    return player
