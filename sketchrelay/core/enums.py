from enum import Enum

class SeasonStatus(str, Enum):
    SETUP = "SETUP"                 # 생성 직후, 참가 가능
    PENDING_START = "PENDING_START" # 참가 가능 (레거시 상태)
    OPEN = "OPEN"                   # 참가 가능
    ACTIVE = "ACTIVE"               # 게임 진행중
    CANCELLED = "CANCELLED"         # 모집 시간 종료 시 최소 인원 미달
    COMPLETED = "COMPLETED"         # 모든 게임 종료
    TERMINATED = "TERMINATED"       # 관리자 강제 종료

class GameStatus(str, Enum):
    SETUP = "SETUP"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    TERMINATED = "TERMINATED"

class TurnType(str, Enum):
    WRITING = "WRITING"
    DRAWING = "DRAWING"

class TurnStatus(str, Enum):
    OFFERED = "OFFERED"     # 플레이어에게 제안됨
    CLAIMED = "CLAIMED"     # 플레이어가 수락함
    COMPLETED = "COMPLETED" # 제출 완료
    SKIPPED = "SKIPPED"     # 시간 초과로 건너뜀
    EXPIRED = "EXPIRED"     # 수락 대기 시간 초과

class ActivationTrigger(str, Enum):
    MAX_PLAYERS = "max_players"
    OPEN_DURATION_TIMEOUT = "open_duration_timeout"
    ADMIN = "admin"

class InstructionType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"

class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY = "CAPACITY"
    DUPLICATE = "DUPLICATE"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    GAME_CREATION = "GAME_CREATION"
    PERSISTENCE = "PERSISTENCE"
    UNKNOWN = "UNKNOWN"
