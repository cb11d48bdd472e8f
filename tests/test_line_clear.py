"""Tests for lock resolution, scoring and the gravity curve."""

import pytest

from falling_blocks.game import ConfigurationError, GameGrid, LineClearEngine, Piece, ScoringRules, TetrominoType


@pytest.fixture
def engine():
    return LineClearEngine()


def _grid_with_rows(rows, open_cols):
    grid = GameGrid(10, 20)
    for row in rows:
        grid.grid[row, :] = 3
        for col in open_cols:
            grid.grid[row, col] = 0
    return grid


class TestLock:
    def test_lock_without_clear(self, engine):
        grid = GameGrid(10, 20)
        result = engine.lock(grid, Piece(TetrominoType.O, 0, 4, 18), score=300, lines_cleared=3)
        assert result.cleared_rows == ()
        assert result.cleared_count == 0
        assert result.grid is result.merged
        assert result.grid.grid[18:, 4:6].tolist() == [[2, 2], [2, 2]]
        assert (result.score, result.lines_cleared, result.level) == (300, 3, 1)
        assert not grid.grid.any()

    def test_single_row_clear(self, engine):
        grid = _grid_with_rows([19], open_cols=[0, 1])
        result = engine.lock(grid, Piece(TetrominoType.O, 0, 0, 18), score=0, lines_cleared=0)
        assert result.cleared_rows == (19,)
        assert result.score == 100
        assert result.lines_cleared == 1
        assert result.grid.height == 20
        # The top half of the O drops into the bottom row.
        assert result.grid.grid[19].tolist() == [2, 2] + [0] * 8
        assert result.merged.grid[19].all()

    def test_four_rows_score_flat(self, engine):
        grid = _grid_with_rows(range(16, 20), open_cols=[0])
        vertical_i = Piece(TetrominoType.I, 1, 0, 16)
        result = engine.lock(grid, vertical_i, score=50, lines_cleared=0)
        assert result.cleared_rows == (16, 17, 18, 19)
        assert result.score == 50 + 400
        assert result.lines_cleared == 4
        assert not result.grid.grid.any()

    @pytest.mark.parametrize("before, level_after", [(9, 2), (19, 3), (0, 1)])
    def test_level_recomputed(self, engine, before, level_after):
        grid = _grid_with_rows([19], open_cols=[0, 1])
        result = engine.lock(grid, Piece(TetrominoType.O, 0, 0, 18), score=0, lines_cleared=before)
        assert result.lines_cleared == before + 1
        assert result.level == level_after


class TestScoringRules:
    @pytest.mark.parametrize(
        "lines, level",
        [(0, 1), (9, 1), (10, 2), (19, 2), (20, 3), (95, 10)],
    )
    def test_level_for_lines(self, lines, level):
        assert ScoringRules().level_for_lines(lines) == level

    @pytest.mark.parametrize("lines, points", [(0, 0), (1, 100), (2, 200), (4, 400)])
    def test_flat_points_per_line(self, lines, points):
        assert ScoringRules().score_for_lines(lines) == points

    @pytest.mark.parametrize(
        "level, interval",
        [(1, 1000), (2, 900), (5, 600), (9, 200), (10, 200), (30, 200)],
    )
    def test_gravity_interval(self, level, interval):
        assert ScoringRules().gravity_interval_ms(level) == interval

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"lines_per_level": 0},
            {"points_per_line": -1},
            {"min_interval_ms": 0},
            {"base_interval_ms": 100, "min_interval_ms": 200},
        ],
    )
    def test_invalid_rules_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            ScoringRules(**kwargs)
