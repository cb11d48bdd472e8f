"""Tests for the persisted snapshot and summary shapes."""

import pytest

from falling_blocks.game import (
    ActionCode,
    GameSnapshot,
    Piece,
    ReplayAction,
    ReplayFormatError,
    SessionSummary,
    SnapshotError,
    TetrominoType,
)


class TestGameSnapshot:
    def test_from_dict(self, make_snapshot):
        snapshot = GameSnapshot.from_dict(
            make_snapshot(piece={"type": "S", "rotation": 1, "x": 2, "y": 3}, queue=["I", "Z"], hold="O", lines=21, score=2100)
        )
        assert snapshot.status == "active"
        assert snapshot.level == 3
        assert snapshot.lines_cleared == 21
        assert snapshot.current_piece == Piece(TetrominoType.S, 1, 2, 3)
        assert snapshot.next_queue == (TetrominoType.I, TetrominoType.Z)
        assert snapshot.hold_piece is TetrominoType.O
        assert snapshot.seed == 7
        assert len(snapshot.board) == 200

    def test_optional_keys_omitted(self, make_snapshot):
        data = make_snapshot(seed=None)
        assert GameSnapshot.from_dict(data).to_dict() == data
        assert set(data) == {"status", "score", "level", "linesCleared", "board", "nextQueue"}

    def test_rotation_defaults_to_zero(self, make_snapshot):
        snapshot = GameSnapshot.from_dict(make_snapshot(piece={"type": "J", "x": 0, "y": 0}))
        assert snapshot.current_piece.rotation == 0

    @pytest.mark.parametrize(
        "overrides",
        [
            {"status": "running"},
            {"score": -5},
            {"score": True},
            {"lines": 2.5},
            {"level": 0},
            {"seed": "abc"},
            {"board": "0000"},
            {"hold": "P"},
            {"piece": {"type": "T", "rotation": 0, "y": 0}},
            {"piece": {"type": "T", "rotation": 4, "x": 0, "y": 0}},
            {"board": ["x"] * 200},
            {"board": [None] * 200},
            {"board": []},
        ],
    )
    def test_invalid_fields_rejected(self, make_snapshot, overrides):
        with pytest.raises(SnapshotError):
            GameSnapshot.from_dict(make_snapshot(**overrides))


class TestSessionSummary:
    def _summary(self, **kwargs):
        fields = dict(
            status="finished",
            score=300,
            level=1,
            lines_cleared=3,
            duration_ms=45000,
            actions=(ReplayAction(0, ActionCode.LEFT), ReplayAction(120, ActionCode.ROTATE)),
        )
        fields.update(kwargs)
        return SessionSummary(**fields)

    def test_to_dict(self):
        assert self._summary(game_over_reason="board_full").to_dict() == {
            "status": "finished",
            "score": 300,
            "level": 1,
            "linesCleared": 3,
            "durationMs": 45000,
            "replayActions": [{"t": 0, "a": "L"}, {"t": 120, "a": "ROT"}],
            "gameOverReason": "board_full",
        }

    def test_from_dict_restores_summary(self):
        summary = self._summary(status="abandoned")
        assert SessionSummary.from_dict(summary.to_dict()) == summary

    def test_zero_level_rejected(self):
        data = self._summary().to_dict()
        data["level"] = 0
        with pytest.raises(SnapshotError):
            SessionSummary.from_dict(data)

    def test_active_status_rejected(self):
        data = self._summary().to_dict()
        data["status"] = "active"
        with pytest.raises(SnapshotError):
            SessionSummary.from_dict(data)

    def test_bad_replay_rejected(self):
        data = self._summary().to_dict()
        data["replayActions"] = [{"t": 10, "a": "L"}, {"t": 5, "a": "R"}]
        with pytest.raises(ReplayFormatError):
            SessionSummary.from_dict(data)
