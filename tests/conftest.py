"""Shared pytest fixtures.

Sessions in tests run against a FakeClock so replay timestamps and
durations are exact. `make_snapshot` builds persisted snapshots, which is
the public way to put a session into a specific board position.
"""

from typing import Dict, Iterable, Optional

import pytest

WIDTH, HEIGHT = 10, 20


class FakeClock:
    def __init__(self, start: float = 5000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def build_board(rows: Optional[Dict[int, Iterable[int]]] = None, value: int = 3) -> list:
    """Flat board where each key of `rows` is a row index filled with `value`
    in every column except those listed."""
    board = [0] * (WIDTH * HEIGHT)
    for row, empty_cols in (rows or {}).items():
        empty = set(empty_cols)
        for col in range(WIDTH):
            if col not in empty:
                board[row * WIDTH + col] = value
    return board


@pytest.fixture
def make_snapshot():
    def _make(
        board=None,
        piece=None,
        queue=("T",),
        status="active",
        score=0,
        lines=0,
        level=None,
        hold=None,
        seed=7,
    ) -> dict:
        data = {
            "status": status,
            "score": score,
            "level": level if level is not None else lines // 10 + 1,
            "linesCleared": lines,
            "board": board if board is not None else build_board(),
            "nextQueue": list(queue),
        }
        if seed is not None:
            data["seed"] = seed
        if piece is not None:
            data["currentPiece"] = piece
        if hold is not None:
            data["holdPiece"] = hold
        return data

    return _make


@pytest.fixture
def board_builder():
    return build_board
