from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np

from .errors import PieceDataError


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7

    @property
    def code(self) -> str:
        return self.name

    @classmethod
    def from_code(cls, code: str) -> "TetrominoType":
        try:
            return cls[code]
        except KeyError:
            raise PieceDataError(f"unknown piece type code: {code!r}") from None


Shape = np.ndarray

CELLS_PER_PIECE = 4


def rotate_cw(shape: Shape) -> Shape:
    """Rotate 90 degrees clockwise: transpose, then reverse each row.

    An R x C matrix becomes C x R.
    """
    return np.ascontiguousarray(shape.T[:, ::-1])


def validate_shape(shape: Shape) -> None:
    if not isinstance(shape, np.ndarray) or shape.ndim != 2 or shape.size == 0:
        raise PieceDataError("piece shape must be a non-empty 2-D matrix")
    if not np.isin(shape, (0, 1)).all():
        raise PieceDataError("piece shape cells must be 0 or 1")
    if int(shape.sum()) != CELLS_PER_PIECE:
        raise PieceDataError(f"piece shape must occupy exactly {CELLS_PER_PIECE} cells")
    # Bounding box must be tight, otherwise spawn centering is off.
    if not (shape.any(axis=1).all() and shape.any(axis=0).all()):
        raise PieceDataError("piece shape has an empty border row or column")


BASE_SHAPES: Dict[TetrominoType, Shape] = {
    TetrominoType.I: np.array([[1, 1, 1, 1]], dtype=np.int8),
    TetrominoType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    TetrominoType.T: np.array([[0, 1, 0], [1, 1, 1]], dtype=np.int8),
    TetrominoType.S: np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8),
    TetrominoType.Z: np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8),
    TetrominoType.J: np.array([[1, 0, 0], [1, 1, 1]], dtype=np.int8),
    TetrominoType.L: np.array([[0, 0, 1], [1, 1, 1]], dtype=np.int8),
}

for _kind, _shape in BASE_SHAPES.items():
    validate_shape(_shape)
    _shape.flags.writeable = False


def shape_for(kind: TetrominoType, rotation: int = 0) -> Shape:
    shape = BASE_SHAPES[kind]
    for _ in range(rotation % 4):
        shape = rotate_cw(shape)
    return shape


@dataclass(frozen=True)
class Piece:
    """The falling piece: type, rotation index and origin of its bounding box."""

    kind: TetrominoType
    rotation: int = 0  # 0..3
    x: int = 0
    y: int = 0

    def shape(self) -> Shape:
        return shape_for(self.kind, self.rotation)

    def rotated(self) -> "Piece":
        return Piece(self.kind, (self.rotation + 1) % 4, self.x, self.y)

    def translated(self, dx: int, dy: int) -> "Piece":
        return Piece(self.kind, self.rotation, self.x + dx, self.y + dy)

    def cells(self) -> List[Tuple[int, int]]:
        s = self.shape()
        h, w = s.shape
        cells: List[Tuple[int, int]] = []
        for dy in range(h):
            for dx in range(w):
                if s[dy, dx]:
                    cells.append((self.x + dx, self.y + dy))
        return cells

    def to_dict(self) -> dict:
        return {"type": self.kind.code, "rotation": self.rotation, "x": self.x, "y": self.y}
