from typing import Any, Optional
from pydantic import BaseModel, Field
from sketchrelay.core.enums import InstructionType, ErrorKind
from sketchrelay.core.exceptions import SketchRelayError


class InstructionFormatting(BaseModel):
    ephemeral: bool = False
    dm: bool = False                 # 참가자 개별 전송
    channel: Optional[str] = None    # 특정 채널로 전송


class InstructionContext(BaseModel):
    guild_id: Optional[str] = None
    user_id: Optional[str] = None
    recipients: list[str] = Field(default_factory=list)  # DM 대상 외부 식별자 목록


class MessageInstruction(BaseModel):
    """
    모든 공개 연산의 결과.
    예외는 서비스 경계를 넘지 않고 항상 이 형태(success/error/info + key + data)로 반환됩니다.
    """
    type: InstructionType
    key: str
    data: dict[str, Any] = Field(default_factory=dict)
    error_kind: Optional[ErrorKind] = None
    formatting: Optional[InstructionFormatting] = None
    context: Optional[InstructionContext] = None

    @property
    def is_success(self) -> bool:
        return self.type == InstructionType.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.type == InstructionType.ERROR

    @classmethod
    def success(cls, key: str, **data) -> "MessageInstruction":
        return cls(type=InstructionType.SUCCESS, key=key, data=data)

    @classmethod
    def info(cls, key: str, **data) -> "MessageInstruction":
        return cls(type=InstructionType.INFO, key=key, data=data)

    @classmethod
    def from_error(cls, exc: SketchRelayError) -> "MessageInstruction":
        # 무해한 경합 결과(이미 활성화됨 등)는 실패로 노출하지 않음
        return cls(
            type=InstructionType.INFO if exc.benign else InstructionType.ERROR,
            key=exc.key,
            data=dict(exc.data),
            error_kind=exc.kind,
        )
