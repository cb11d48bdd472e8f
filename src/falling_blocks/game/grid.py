from __future__ import annotations

from typing import FrozenSet, Iterable, List

import numpy as np

from .errors import SnapshotError
from .pieces import Shape, TetrominoType


class GameGrid:
    """Discrete 2D board for the falling pieces.

    The grid uses 0 for empty cells and the piece-type id (1..7) for filled
    cells. Row 0 is the top of the board. Operations that change cells return
    a new grid and leave the receiver untouched.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    @classmethod
    def _wrap(cls, cells: np.ndarray) -> "GameGrid":
        new_grid = cls(cells.shape[1], cells.shape[0])
        new_grid.grid = cells
        return new_grid

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_placeable(self, shape: Shape, x: int, y: int) -> bool:
        """True iff every occupied cell of `shape` at offset (x, y) is inside and empty."""
        h, w = shape.shape
        for py in range(h):
            for px in range(w):
                if not shape[py, px]:
                    continue
                bx, by = x + px, y + py
                if not self.is_inside(bx, by):
                    return False
                if self.grid[by, bx] != 0:
                    return False
        return True

    def merge(self, shape: Shape, x: int, y: int, kind: TetrominoType) -> "GameGrid":
        """Return a new grid with the occupied cells of `shape` written as `kind`."""
        cells = self.grid.copy()
        h, w = shape.shape
        for py in range(h):
            for px in range(w):
                if shape[py, px]:
                    cells[y + py, x + px] = int(kind)
        return self._wrap(cells)

    def detect_full_rows(self) -> FrozenSet[int]:
        full_rows = np.where(np.all(self.grid != 0, axis=1))[0]
        return frozenset(int(r) for r in full_rows)

    def compact(self, full_rows: Iterable[int]) -> "GameGrid":
        """Drop `full_rows` and prepend empty rows to restore the height."""
        rows = sorted(set(full_rows))
        if not rows:
            return self.copy()
        kept = np.delete(self.grid, rows, axis=0)
        new_rows = np.zeros((len(rows), self.width), dtype=np.int8)
        return self._wrap(np.vstack((new_rows, kept)))

    def get_max_height(self) -> int:
        # y=0 is top; find first non-empty from top
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return self.height - int(non_empty_rows[0])

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            seen_block = False
            for cell in self.grid[:, x]:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def copy(self) -> "GameGrid":
        return self._wrap(self.grid.copy())

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()

    def to_flat(self) -> List[int]:
        return [int(v) for v in self.grid.reshape(-1)]

    @classmethod
    def from_flat(cls, values: Iterable[int], width: int, height: int) -> "GameGrid":
        cells = np.asarray(list(values), dtype=np.int64)
        if cells.size != width * height:
            raise SnapshotError(f"board has {cells.size} cells, expected {width * height}")
        if cells.size and (cells.min() < 0 or cells.max() > max(TetrominoType)):
            raise SnapshotError("board cells must be 0 or a piece-type id 1..7")
        return cls._wrap(cells.astype(np.int8).reshape(height, width))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameGrid):
            return NotImplemented
        return self.grid.shape == other.grid.shape and bool(np.array_equal(self.grid, other.grid))

    def __repr__(self) -> str:
        return f"GameGrid(width={self.width}, height={self.height}, filled={int(np.count_nonzero(self.grid))})"
