"""Persisted shapes handed to collaborators: the game snapshot and the
finished-session summary with its replay log.

Both serialise to plain dicts with the camelCase keys the record store uses;
optional keys are omitted rather than written as None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import ValidationError

from .errors import SnapshotError
from .models import SnapshotModel, SummaryModel, describe
from .pieces import Piece, TetrominoType
from .replay import ReplayAction, parse_replay_actions


@dataclass(frozen=True)
class GameSnapshot:
    status: str
    score: int
    level: int
    lines_cleared: int
    board: Tuple[int, ...]
    current_piece: Optional[Piece] = None
    next_queue: Tuple[TetrominoType, ...] = ()
    hold_piece: Optional[TetrominoType] = None
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status,
            "score": self.score,
            "level": self.level,
            "linesCleared": self.lines_cleared,
            "board": list(self.board),
        }
        if self.current_piece is not None:
            data["currentPiece"] = self.current_piece.to_dict()
        data["nextQueue"] = [kind.code for kind in self.next_queue]
        if self.hold_piece is not None:
            data["holdPiece"] = self.hold_piece.code
        if self.seed is not None:
            data["seed"] = self.seed
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameSnapshot":
        try:
            model = SnapshotModel.model_validate(data)
        except ValidationError as exc:
            raise SnapshotError(describe(exc)) from exc
        piece = model.current_piece
        return cls(
            status=model.status,
            score=model.score,
            level=model.level,
            lines_cleared=model.lines_cleared,
            board=tuple(model.board),
            current_piece=(
                Piece(TetrominoType.from_code(piece.type), piece.rotation, piece.x, piece.y)
                if piece is not None
                else None
            ),
            next_queue=tuple(TetrominoType.from_code(code) for code in model.next_queue),
            hold_piece=TetrominoType.from_code(model.hold_piece) if model.hold_piece is not None else None,
            seed=model.seed,
        )


@dataclass(frozen=True)
class SessionSummary:
    status: str
    score: int
    level: int
    lines_cleared: int
    duration_ms: int
    actions: Tuple[ReplayAction, ...]
    game_over_reason: Optional[str] = None

    def replay_actions(self) -> list:
        return [action.to_dict() for action in self.actions]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status,
            "score": self.score,
            "level": self.level,
            "linesCleared": self.lines_cleared,
            "durationMs": self.duration_ms,
            "replayActions": self.replay_actions(),
        }
        if self.game_over_reason is not None:
            data["gameOverReason"] = self.game_over_reason
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionSummary":
        try:
            model = SummaryModel.model_validate(data)
        except ValidationError as exc:
            raise SnapshotError(describe(exc)) from exc
        return cls(
            status=model.status,
            score=model.score,
            level=model.level,
            lines_cleared=model.lines_cleared,
            duration_ms=model.duration_ms,
            actions=tuple(parse_replay_actions(model.replay_actions)),
            game_over_reason=model.game_over_reason,
        )
