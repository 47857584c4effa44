from fastapi import Request, status
from fastapi.responses import JSONResponse
from sketchrelay.core import exceptions
from sketchrelay.core.enums import ErrorKind, InstructionType
from sketchrelay.core.notify import send_ntfy_notification
from sketchrelay.schemas.instruction import MessageInstruction
import logging

logger = logging.getLogger(__name__)

ERROR_KIND_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.CAPACITY: status.HTTP_409_CONFLICT,
    ErrorKind.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorKind.CONSTRAINT_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.GAME_CREATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

def status_for_instruction(instruction: MessageInstruction) -> int:
    # info(이미 활성화됨 등)는 실패가 아니므로 200
    if instruction.type != InstructionType.ERROR:
        return status.HTTP_200_OK
    return ERROR_KIND_STATUS.get(instruction.error_kind, status.HTTP_400_BAD_REQUEST)

def instruction_response(instruction: MessageInstruction, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    status_code = status_for_instruction(instruction)
    if instruction.is_success:
        status_code = success_status
    return JSONResponse(status_code=status_code, content=instruction.model_dump(mode="json"))

async def sketchrelay_exception_handler(request: Request, exc: exceptions.SketchRelayError):
    status_code = ERROR_KIND_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)

    if status_code >= 500:
        # 시스템 에러는 관리자 알림 전송
        await send_ntfy_notification(
            message=f"Season System Error: {exc.message}",
            title="🚨 Critical Season Error",
            priority="high"
        )

    return JSONResponse(
        status_code=status_code,
        content=MessageInstruction.from_error(exc).model_dump(mode="json"),
    )

async def general_exception_handler(request: Request, exc: Exception):
    # 예상치 못한 모든 에러 처리
    error_msg = f"Unhandled Exception: {str(exc)}\nPath: {request.url.path}"
    logger.error(f"❌ {error_msg}", exc_info=True)

    await send_ntfy_notification(
        message=error_msg,
        title="🔥 500 Internal Server Error",
        priority="max"
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error. Admin has been notified."},
    )
