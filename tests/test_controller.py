"""Tests for spawning, moving and rotating the falling piece."""

import numpy as np
import pytest

from falling_blocks.game import GameGrid, MoveOutcome, Piece, PieceController, TetrominoType


@pytest.fixture
def grid():
    return GameGrid(10, 20)


@pytest.fixture
def controller():
    return PieceController()


class TestSpawn:
    def test_i_piece_centred_on_top_row(self, grid, controller):
        piece = controller.spawn(grid, TetrominoType.I)
        assert piece == Piece(TetrominoType.I, rotation=0, x=3, y=0)

    @pytest.mark.parametrize(
        "kind, x",
        [(TetrominoType.O, 4), (TetrominoType.T, 3), (TetrominoType.S, 3), (TetrominoType.L, 3)],
    )
    def test_spawn_column_depends_on_width(self, grid, controller, kind, x):
        assert controller.spawn(grid, kind).x == x

    def test_spawn_does_not_touch_grid(self, grid, controller):
        controller.spawn(grid, TetrominoType.T)
        assert not grid.grid.any()

    def test_blocked_spawn_signals_game_over(self, grid, controller):
        grid.grid[0, :] = 1
        grid.grid[0, 0] = 0
        assert controller.spawn(grid, TetrominoType.I) is None

    def test_custom_spawn_row(self, grid):
        assert PieceController(spawn_y=2).spawn(grid, TetrominoType.O).y == 2


class TestMove:
    def test_free_move(self, grid, controller):
        piece = Piece(TetrominoType.T, 0, 3, 0)
        result = controller.move(piece, grid, 1, 0)
        assert result.outcome is MoveOutcome.MOVED
        assert result.piece == Piece(TetrominoType.T, 0, 4, 0)

    def test_move_left_at_wall_rejected(self, grid, controller):
        piece = Piece(TetrominoType.O, 0, 0, 5)
        result = controller.move(piece, grid, -1, 0)
        assert result.outcome is MoveOutcome.REJECTED
        assert result.piece is piece

    def test_move_into_blocks_rejected(self, grid, controller):
        grid.grid[5, 6] = 2
        piece = Piece(TetrominoType.O, 0, 4, 4)
        assert controller.move(piece, grid, 1, 0).outcome is MoveOutcome.REJECTED

    def test_blocked_downward_move_locks(self, grid, controller):
        piece = Piece(TetrominoType.O, 0, 4, 18)
        result = controller.move(piece, grid, 0, 1)
        assert result.outcome is MoveOutcome.LOCK
        assert result.piece is piece

    def test_resting_on_blocks_locks(self, grid, controller):
        grid.grid[10, 5] = 4
        piece = Piece(TetrominoType.O, 0, 4, 8)
        assert controller.move(piece, grid, 0, 1).outcome is MoveOutcome.LOCK


class TestRotate:
    def test_free_rotation(self, grid, controller):
        piece = Piece(TetrominoType.I, 0, 3, 0)
        result = controller.rotate(piece, grid)
        assert result.outcome is MoveOutcome.MOVED
        assert result.piece == Piece(TetrominoType.I, 1, 3, 0)
        assert result.piece.shape().shape == (4, 1)

    def test_rotation_out_of_bounds_rejected_without_kick(self, grid, controller):
        piece = Piece(TetrominoType.I, 0, 3, 19)
        result = controller.rotate(piece, grid)
        assert result.outcome is MoveOutcome.REJECTED
        assert result.piece is piece

    def test_rotation_into_blocks_rejected(self, grid, controller):
        grid.grid[2, 3] = 1
        piece = Piece(TetrominoType.I, 0, 3, 0)
        assert controller.rotate(piece, grid).outcome is MoveOutcome.REJECTED

    @pytest.mark.parametrize("kind", list(TetrominoType))
    def test_four_rotations_restore_shape(self, grid, controller, kind):
        piece = Piece(kind, 0, 4, 8)
        original = piece.shape()
        for _ in range(4):
            result = controller.rotate(piece, grid)
            assert result.outcome is MoveOutcome.MOVED
            piece = result.piece
        assert np.array_equal(piece.shape(), original)
        assert (piece.x, piece.y) == (4, 8)

    def test_o_rotation_keeps_cells(self, grid, controller):
        piece = Piece(TetrominoType.O, 0, 4, 0)
        rotated = controller.rotate(piece, grid).piece
        assert sorted(rotated.cells()) == sorted(piece.cells())
