from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .grid import GameGrid
from .pieces import Piece
from .rules import ScoringRules


@dataclass(frozen=True)
class LockResult:
    merged: GameGrid
    grid: GameGrid
    cleared_rows: Tuple[int, ...]
    score: int
    lines_cleared: int
    level: int

    @property
    def cleared_count(self) -> int:
        return len(self.cleared_rows)


class LineClearEngine:
    """Merges a locked piece, clears full rows and recomputes the totals."""

    def __init__(self, rules: ScoringRules | None = None) -> None:
        self.rules = rules or ScoringRules()

    def lock(self, grid: GameGrid, piece: Piece, score: int, lines_cleared: int) -> LockResult:
        merged = grid.merge(piece.shape(), piece.x, piece.y, piece.kind)
        full_rows = tuple(sorted(merged.detect_full_rows()))
        if not full_rows:
            return LockResult(
                merged=merged,
                grid=merged,
                cleared_rows=(),
                score=score,
                lines_cleared=lines_cleared,
                level=self.rules.level_for_lines(lines_cleared),
            )
        count = len(full_rows)
        total_lines = lines_cleared + count
        return LockResult(
            merged=merged,
            grid=merged.compact(full_rows),
            cleared_rows=full_rows,
            score=score + self.rules.score_for_lines(count),
            lines_cleared=total_lines,
            level=self.rules.level_for_lines(total_lines),
        )
