"""Game module for Falling Blocks.

Exports the simulation core and supporting classes:
- TetrominoType, Piece: piece catalog and the falling piece
- GameGrid: board cells, placement checks and row compaction
- PieceController: spawn, move and rotate against a grid
- LineClearEngine, ScoringRules: lock resolution, scoring and gravity curve
- ReplayRecorder, ReplayCursor: player action log and playback cursor
- GameSession: the orchestrating state machine and its events
"""

from .controller import MoveOutcome, MoveResult, PieceController
from .errors import (
    ConfigurationError,
    FallingBlocksError,
    PieceDataError,
    RecordNotFoundError,
    ReplayFormatError,
    SnapshotError,
)
from .events import EventBus, GameOver, LinesCleared, PieceLocked, SessionFinished
from .grid import GameGrid
from .line_clear import LineClearEngine, LockResult
from .pieces import BASE_SHAPES, Piece, TetrominoType, rotate_cw, shape_for
from .replay import ActionCode, ReplayAction, ReplayCursor, ReplayRecorder, parse_replay_actions
from .rules import ScoringRules
from .session import BOARD_FULL, CommandOutcome, GameConfig, GameSession, SessionStatus
from .snapshot import GameSnapshot, SessionSummary

__all__ = [
    "ActionCode",
    "BASE_SHAPES",
    "BOARD_FULL",
    "CommandOutcome",
    "ConfigurationError",
    "EventBus",
    "FallingBlocksError",
    "GameConfig",
    "GameGrid",
    "GameOver",
    "GameSession",
    "GameSnapshot",
    "LineClearEngine",
    "LinesCleared",
    "LockResult",
    "MoveOutcome",
    "MoveResult",
    "Piece",
    "PieceController",
    "PieceDataError",
    "PieceLocked",
    "RecordNotFoundError",
    "ReplayAction",
    "ReplayCursor",
    "ReplayFormatError",
    "ReplayRecorder",
    "ScoringRules",
    "SessionFinished",
    "SessionStatus",
    "SessionSummary",
    "SnapshotError",
    "TetrominoType",
    "parse_replay_actions",
    "rotate_cw",
    "shape_for",
]
