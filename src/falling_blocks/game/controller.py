from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .grid import GameGrid
from .pieces import Piece, TetrominoType, shape_for


class MoveOutcome(Enum):
    MOVED = "moved"
    LOCK = "lock"
    REJECTED = "rejected"


@dataclass(frozen=True)
class MoveResult:
    outcome: MoveOutcome
    piece: Piece


class PieceController:
    """Places, moves and rotates the falling piece against a grid.

    The controller holds no state of its own besides the spawn row; every
    call takes the current piece and grid and returns a new piece.
    """

    def __init__(self, spawn_y: int = 0) -> None:
        self.spawn_y = spawn_y

    def spawn(self, grid: GameGrid, kind: TetrominoType) -> Optional[Piece]:
        """Centre `kind` at the spawn row; None means the board is full."""
        shape = shape_for(kind, 0)
        _, w = shape.shape
        piece = Piece(kind=kind, rotation=0, x=(grid.width - w) // 2, y=self.spawn_y)
        if not grid.is_placeable(shape, piece.x, piece.y):
            return None
        return piece

    def move(self, piece: Piece, grid: GameGrid, dx: int, dy: int) -> MoveResult:
        candidate = piece.translated(dx, dy)
        if grid.is_placeable(candidate.shape(), candidate.x, candidate.y):
            return MoveResult(MoveOutcome.MOVED, candidate)
        # A blocked purely downward step means the piece has come to rest.
        if dx == 0 and dy == 1:
            return MoveResult(MoveOutcome.LOCK, piece)
        return MoveResult(MoveOutcome.REJECTED, piece)

    def rotate(self, piece: Piece, grid: GameGrid) -> MoveResult:
        # No wall kicks: a colliding rotation is rejected, never shifted.
        candidate = piece.rotated()
        if grid.is_placeable(candidate.shape(), candidate.x, candidate.y):
            return MoveResult(MoveOutcome.MOVED, candidate)
        return MoveResult(MoveOutcome.REJECTED, piece)
