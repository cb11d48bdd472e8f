"""Tests for the piece catalog and the falling-piece value type."""

import numpy as np
import pytest

from falling_blocks.game import BASE_SHAPES, Piece, PieceDataError, TetrominoType, rotate_cw, shape_for
from falling_blocks.game.pieces import validate_shape


class TestRotation:
    def test_rotation_swaps_dimensions(self):
        shape = BASE_SHAPES[TetrominoType.I]
        assert shape.shape == (1, 4)
        assert rotate_cw(shape).shape == (4, 1)

    def test_t_piece_rotates_clockwise(self):
        rotated = rotate_cw(BASE_SHAPES[TetrominoType.T])
        assert rotated.tolist() == [[1, 0], [1, 1], [1, 0]]

    def test_l_piece_rotates_clockwise(self):
        rotated = rotate_cw(BASE_SHAPES[TetrominoType.L])
        assert rotated.tolist() == [[1, 0], [1, 0], [1, 1]]

    @pytest.mark.parametrize("kind", list(TetrominoType))
    def test_four_rotations_return_base_shape(self, kind):
        shape = BASE_SHAPES[kind]
        for _ in range(4):
            shape = rotate_cw(shape)
        assert np.array_equal(shape, BASE_SHAPES[kind])

    def test_o_piece_is_rotation_invariant(self):
        o = BASE_SHAPES[TetrominoType.O]
        assert np.array_equal(rotate_cw(o), o)

    @pytest.mark.parametrize("kind", [TetrominoType.I, TetrominoType.S, TetrominoType.Z])
    def test_symmetric_pieces_have_period_two(self, kind):
        assert not np.array_equal(shape_for(kind, 1), BASE_SHAPES[kind])
        assert np.array_equal(shape_for(kind, 2), BASE_SHAPES[kind])

    def test_shape_for_wraps_rotation_index(self):
        assert np.array_equal(shape_for(TetrominoType.J, 5), shape_for(TetrominoType.J, 1))

    def test_rotation_does_not_touch_input(self):
        shape = np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8)
        before = shape.copy()
        rotate_cw(shape)
        assert np.array_equal(shape, before)


class TestCatalog:
    def test_ids_match_board_values(self):
        assert [int(t) for t in TetrominoType] == [1, 2, 3, 4, 5, 6, 7]
        assert [t.code for t in TetrominoType] == ["I", "O", "T", "S", "Z", "J", "L"]

    def test_every_piece_has_four_cells(self):
        for shape in BASE_SHAPES.values():
            assert int(shape.sum()) == 4

    def test_from_code(self):
        assert TetrominoType.from_code("Z") is TetrominoType.Z

    def test_unknown_code_raises(self):
        with pytest.raises(PieceDataError):
            TetrominoType.from_code("Q")

    @pytest.mark.parametrize(
        "shape",
        [
            np.array([1, 1, 1, 1]),
            np.array([[1, 1, 1]]),
            np.array([[1, 2], [1, 1]]),
            np.array([[0, 0, 0], [1, 1, 1], [0, 1, 0]]),
            np.zeros((0, 0)),
        ],
    )
    def test_malformed_shapes_rejected(self, shape):
        with pytest.raises(PieceDataError):
            validate_shape(shape)


class TestPiece:
    def test_cells_follow_origin(self):
        piece = Piece(TetrominoType.T, rotation=0, x=3, y=5)
        assert sorted(piece.cells()) == [(3, 6), (4, 5), (4, 6), (5, 6)]

    def test_rotated_and_translated_return_new_pieces(self):
        piece = Piece(TetrominoType.L, rotation=3, x=1, y=1)
        assert piece.rotated() == Piece(TetrominoType.L, 0, 1, 1)
        assert piece.translated(2, 1) == Piece(TetrominoType.L, 3, 3, 2)
        assert piece == Piece(TetrominoType.L, 3, 1, 1)

    def test_dict_form(self):
        piece = Piece(TetrominoType.S, rotation=1, x=4, y=7)
        data = piece.to_dict()
        assert data == {"type": "S", "rotation": 1, "x": 4, "y": 7}
