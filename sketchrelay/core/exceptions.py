from typing import Any, Optional
from sketchrelay.core.enums import ErrorKind


class SketchRelayError(Exception):
    """Base exception for SketchRelay application."""
    kind: ErrorKind = ErrorKind.UNKNOWN
    key: str = "error_unknown"
    # benign=True 인 에러는 실패가 아니라 "이미 끝난 일" 로 취급합니다. (동시 활성화 경합의 패자 등)
    benign: bool = False

    def __init__(self, message: str = "An unexpected error occurred", key: Optional[str] = None, data: Optional[dict] = None):
        self.message = message
        if key is not None:
            self.key = key
        self.data: dict[str, Any] = data or {}
        super().__init__(self.message)

# --- Validation Errors (400) ---
class ValidationFailedError(SketchRelayError):
    kind = ErrorKind.VALIDATION
    key = "validation_error"

class MinMaxPlayersError(ValidationFailedError):
    key = "season_create_error_min_max_players"

    def __init__(self, min_players: int, max_players: int, message: str = None):
        if message is None:
            message = f"maxPlayers ({max_players}) cannot be less than minPlayers ({min_players})"
        super().__init__(message, data={"minPlayers": min_players, "maxPlayers": max_players})

# --- Not Found Errors (404) ---
class EntityNotFoundError(SketchRelayError):
    kind = ErrorKind.NOT_FOUND
    key = "not_found"

class SeasonNotFoundError(EntityNotFoundError):
    key = "season_error_not_found"

    def __init__(self, season_id: str, key: str = None):
        super().__init__(f"Season {season_id} not found", key=key, data={"seasonId": season_id})

class PlayerNotFoundError(EntityNotFoundError):
    key = "season_join_error_player_not_found"

    def __init__(self, player_id: str, key: str = None):
        super().__init__(f"Player {player_id} not found", key=key, data={"playerId": player_id})

class CreatorNotFoundError(EntityNotFoundError):
    key = "season_create_error_creator_player_not_found"

    def __init__(self, player_id: str):
        super().__init__(f"Creator player {player_id} not found", data={"playerId": player_id})

# --- Invalid State Errors (409) ---
class InvalidStateError(SketchRelayError):
    kind = ErrorKind.INVALID_STATE
    key = "invalid_state"

class SeasonNotJoinableError(InvalidStateError):
    key = "season_join_error_not_open"

    def __init__(self, season_id: str, status: str):
        super().__init__(
            f"Season {season_id} is not open for joining (status: {status})",
            data={"seasonId": season_id, "status": status},
        )

class SeasonAlreadyActiveError(InvalidStateError):
    key = "season_activate_already_active"
    benign = True

    def __init__(self, season_id: str, status: str):
        super().__init__(
            f"Season {season_id} is already {status}",
            data={"seasonId": season_id, "currentStatus": status},
        )

class SeasonInvalidStatusError(InvalidStateError):
    key = "season_activate_error_invalid_status"

    def __init__(self, season_id: str, status: str, expected: list[str] = None, key: str = None):
        super().__init__(
            f"Season {season_id} has invalid status {status} for this operation",
            key=key,
            data={"seasonId": season_id, "currentStatus": status, "expectedStatuses": expected or []},
        )

class SeasonAlreadyTerminatedError(InvalidStateError):
    key = "season_terminate_error_already_terminated"

    def __init__(self, season_id: str):
        super().__init__(f"Season {season_id} is already terminated", data={"seasonId": season_id})

# --- Capacity / Duplicate Errors (409) ---
class CapacityError(SketchRelayError):
    kind = ErrorKind.CAPACITY
    key = "capacity_error"

class SeasonFullError(CapacityError):
    key = "season_join_error_full"

    def __init__(self, season_id: str, current_players: int, max_players: int):
        super().__init__(
            f"Season {season_id} is full ({current_players}/{max_players})",
            data={"seasonId": season_id, "currentPlayers": current_players, "maxPlayers": max_players},
        )

class AlreadyJoinedError(SketchRelayError):
    kind = ErrorKind.DUPLICATE
    key = "season_join_error_already_joined"

    def __init__(self, player_id: str, season_id: str):
        super().__init__(
            f"Player {player_id} already joined season {season_id}",
            data={"playerId": player_id, "seasonId": season_id},
        )

# --- Constraint Violation (유일하게 상태를 바꾸는 에러: CANCELLED) ---
class ConstraintViolationError(SketchRelayError):
    kind = ErrorKind.CONSTRAINT_VIOLATION
    key = "constraint_violation"

class MinPlayersNotMetError(ConstraintViolationError):
    key = "season_activate_error_min_players_not_met"

    def __init__(self, season_id: str, player_count: int, min_players: int, trigger: str, key: str = None):
        super().__init__(
            f"Season {season_id} has {player_count} players, needs {min_players}",
            key=key,
            data={"seasonId": season_id, "playerCount": player_count, "minPlayers": min_players, "trigger": trigger},
        )

# --- Fan-out Errors ---
class GameCreationError(SketchRelayError):
    kind = ErrorKind.GAME_CREATION
    key = "season_activate_error_game_creation"

    def __init__(self, season_id: str, original_error: str):
        super().__init__(
            f"Game creation failed for season {season_id}: {original_error}",
            data={"seasonId": season_id, "error": original_error},
        )

# --- System Errors (500) ---
class PersistenceError(SketchRelayError):
    kind = ErrorKind.PERSISTENCE

    def __init__(self, operation: str, error_code: Optional[str], original_error: str):
        super().__init__(
            f"Database error during {operation}: {original_error}",
            key=f"{operation}_error_database",
            data={"errorCode": error_code, "message": original_error},
        )

    @classmethod
    def from_exception(cls, operation: str, exc: Exception) -> "PersistenceError":
        # asyncpg 는 SQLSTATE를 sqlstate/pgcode 로, SQLAlchemy 는 자체 code 를 가짐
        orig = getattr(exc, "orig", None)
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None) or getattr(exc, "code", None)
        return cls(operation, code, str(orig) if orig is not None else str(exc))

class UnknownError(SketchRelayError):
    kind = ErrorKind.UNKNOWN

    def __init__(self, operation: str, original_error: str):
        super().__init__(
            f"Unexpected error during {operation}: {original_error}",
            key=f"{operation}_error_unknown",
            data={"message": original_error},
        )
