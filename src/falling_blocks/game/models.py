"""
Pydantic models for the persisted record shapes.
Mirrors the camelCase documents the record store keeps for games and replays.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, ValidationError

PieceCode = Literal["I", "O", "T", "S", "Z", "J", "L"]
ActionCodeValue = Literal["L", "R", "D", "ROT"]
Status = Literal["idle", "active", "paused", "finished", "abandoned"]


def describe(exc: ValidationError) -> str:
    """First validation error as `location: message`."""
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"]) or "record"
    return f"{location}: {error['msg']}"


class PieceModel(BaseModel):
    """Falling piece"""
    model_config = ConfigDict(frozen=True)

    type: PieceCode
    rotation: StrictInt = Field(0, ge=0, le=3)
    x: StrictInt
    y: StrictInt


class ReplayActionModel(BaseModel):
    """One recorded player action"""
    model_config = ConfigDict(frozen=True)

    t: StrictFloat = Field(ge=0, allow_inf_nan=False)
    a: ActionCodeValue
    p: Optional[Dict[str, Any]] = None


class SnapshotModel(BaseModel):
    """Game snapshot"""
    model_config = ConfigDict(populate_by_name=True)

    status: Status
    score: StrictInt = Field(ge=0)
    level: StrictInt = Field(ge=1)
    lines_cleared: StrictInt = Field(ge=0, alias="linesCleared")
    board: List[StrictInt] = Field(min_length=1)
    current_piece: Optional[PieceModel] = Field(None, alias="currentPiece")
    next_queue: List[PieceCode] = Field(default_factory=list, alias="nextQueue")
    hold_piece: Optional[PieceCode] = Field(None, alias="holdPiece")
    seed: Optional[StrictInt] = None


class SummaryModel(BaseModel):
    """Finished or abandoned session with its replay log"""
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["finished", "abandoned"]
    score: StrictInt = Field(ge=0)
    level: StrictInt = Field(ge=1)
    lines_cleared: StrictInt = Field(ge=0, alias="linesCleared")
    duration_ms: StrictInt = Field(ge=0, alias="durationMs")
    # Validated separately so malformed logs raise ReplayFormatError.
    replay_actions: List[Any] = Field(default_factory=list, alias="replayActions")
    game_over_reason: Optional[str] = Field(None, alias="gameOverReason")
