from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from sketchrelay.app.exception_handlers import instruction_response
from sketchrelay.core.deps import get_season_service, verify_admin_token
from sketchrelay.core.enums import SeasonStatus
from sketchrelay.schemas.season import SeasonCreate, SeasonJoin, SeasonActivate
from sketchrelay.services.season_service import SeasonService

router = APIRouter(prefix="/seasons", tags=["seasons"])

@router.post("")
async def create_season(options: SeasonCreate, service: SeasonService = Depends(get_season_service)):
    """
    시즌 생성. open_duration이 있으면 모집 마감 시 자동 활성화가 예약됩니다.
    """
    result = await service.create_season(options)
    return instruction_response(result, success_status=status.HTTP_201_CREATED)

@router.get("")
async def list_seasons(
    status_filter: Optional[SeasonStatus] = Query(None, alias="status"),
    service: SeasonService = Depends(get_season_service),
):
    return instruction_response(await service.list_seasons(status_filter))

@router.get("/{season_id}")
async def get_season(season_id: str, service: SeasonService = Depends(get_season_service)):
    return instruction_response(await service.find_season_by_id(season_id))

@router.post("/{season_id}/join")
async def join_season(season_id: str, body: SeasonJoin, service: SeasonService = Depends(get_season_service)):
    """
    시즌 참가. 정원이 차면 이 요청에서 바로 시즌이 활성화됩니다.
    """
    return instruction_response(await service.add_player_to_season(body.player_id, season_id))

@router.post("/{season_id}/activate", dependencies=[Depends(verify_admin_token)])
async def activate_season(
    season_id: str,
    body: Optional[SeasonActivate] = None,
    service: SeasonService = Depends(get_season_service),
):
    body = body or SeasonActivate()
    return instruction_response(await service.activate_season(season_id, body.trigger))

@router.post("/{season_id}/terminate", dependencies=[Depends(verify_admin_token)])
async def terminate_season(season_id: str, service: SeasonService = Depends(get_season_service)):
    return instruction_response(await service.terminate_season(season_id))

@router.post("/{season_id}/completion")
async def check_completion(season_id: str, service: SeasonService = Depends(get_season_service)):
    return instruction_response(await service.check_season_completion(season_id))

@router.get("/{season_id}/results")
async def get_results(season_id: str, service: SeasonService = Depends(get_season_service)):
    return instruction_response(await service.get_season_completion_results(season_id))

@router.get("/{season_id}/announcement")
async def get_announcement(season_id: str, service: SeasonService = Depends(get_season_service)):
    """
    완료 공지 (전송 대상 포함). 완료되지 않은 시즌은 404.
    """
    result = await service.deliver_season_completion_announcement(season_id)
    if result is None:
        return instruction_response(await service.get_season_completion_results(season_id))
    return instruction_response(result)
