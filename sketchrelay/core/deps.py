from typing import Optional
from fastapi import Header, HTTPException, Request, status
from sketchrelay.core.config import settings
from sketchrelay.services.season_service import SeasonService


def get_season_service(request: Request) -> SeasonService:
    """lifespan에서 만들어 둔 SeasonService"""
    return request.app.state.season_service


async def verify_admin_token(x_admin_token: Optional[str] = Header(default=None)):
    """
    관리자 전용 라우트 보호. ADMIN_TOKEN이 비어있으면 관리자 API 자체를 막습니다.
    """
    if not settings.ADMIN_TOKEN or x_admin_token != settings.ADMIN_TOKEN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
