from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Union

import numpy as np

from .controller import MoveOutcome, PieceController
from .errors import ConfigurationError, SnapshotError
from .events import EventBus, GameOver, LinesCleared, PieceLocked, SessionFinished
from .grid import GameGrid
from .line_clear import LineClearEngine
from .pieces import BASE_SHAPES, Piece, TetrominoType
from .replay import ActionCode, Clock, ReplayRecorder, monotonic_ms
from .rules import ScoringRules
from .snapshot import GameSnapshot, SessionSummary

logger = logging.getLogger(__name__)

BOARD_FULL = "board_full"


@dataclass(frozen=True)
class GameConfig:
    width: int = 10
    height: int = 20
    preview_size: int = 1
    spawn_y: int = 0

    def __post_init__(self) -> None:
        widest = max(shape.shape[1] for shape in BASE_SHAPES.values())
        tallest = max(shape.shape[0] for shape in BASE_SHAPES.values())
        if self.width < widest or self.height <= tallest:
            raise ConfigurationError(f"board {self.width}x{self.height} is too small for the piece set")
        if self.preview_size < 1:
            raise ConfigurationError("preview_size must be at least 1")
        if not 0 <= self.spawn_y <= self.height - tallest:
            raise ConfigurationError(f"spawn_y {self.spawn_y} leaves no room for a piece")


class SessionStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    FINISHED = "finished"
    ABANDONED = "abandoned"


class CommandOutcome(Enum):
    APPLIED = "applied"
    LOCKED = "locked"
    REJECTED = "rejected"
    IGNORED = "ignored"


class GameSession:
    """One play attempt: the board, the falling piece, the queue and the replay.

    The session is a command reducer. Commands are applied synchronously and
    report no-ops through their return values; collaborators learn about
    locks, clears and the end of the game through `events`.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.events = EventBus()
        self.controller = PieceController(self.config.spawn_y)
        self.line_clear = LineClearEngine(self.rules)
        self.replay = ReplayRecorder(clock)
        self.status = SessionStatus.IDLE
        self.grid = GameGrid(self.config.width, self.config.height)
        self.score = 0
        self.level = 1
        self.lines_cleared = 0
        self.pieces_placed = 0
        self.current_piece: Optional[Piece] = None
        self.next_queue: List[TetrominoType] = []
        self.hold_piece: Optional[TetrominoType] = None
        self.seed: Optional[int] = None
        self.game_over_reason: Optional[str] = None
        self._rng = random.Random()
        self._summary: Optional[SessionSummary] = None
        self._pending: List[Any] = []
        self._dispatching = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, seed: Optional[int] = None) -> bool:
        if self.status is not SessionStatus.IDLE:
            logger.debug("start ignored in status %s", self.status.value)
            return False
        self.seed = seed
        self._rng = random.Random(seed)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.score = 0
        self.level = 1
        self.lines_cleared = 0
        self.pieces_placed = 0
        self.next_queue = [self._draw() for _ in range(self.config.preview_size)]
        self.status = SessionStatus.ACTIVE
        self.replay.start()
        logger.info("Session started (seed=%s)", seed)
        self._spawn_next()
        self._flush()
        return True

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Union[GameSnapshot, Mapping[str, Any]],
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        clock: Clock = monotonic_ms,
    ) -> "GameSession":
        """Resume an active or paused game from a persisted snapshot.

        The replay log of the restored session starts empty at t=0. The piece
        sequence is reseeded from the stored seed, so it does not continue
        where the original sequence left off. A snapshot without a falling piece
        spawns one from the queue; if that spawn is blocked the session is
        returned already finished, so callers check `is_over` or `summary`.
        """
        if not isinstance(snapshot, GameSnapshot):
            snapshot = GameSnapshot.from_dict(snapshot)
        session = cls(config, rules, clock)
        if snapshot.status not in (SessionStatus.ACTIVE.value, SessionStatus.PAUSED.value):
            raise SnapshotError(f"cannot resume a {snapshot.status} game")
        expected_level = session.rules.level_for_lines(snapshot.lines_cleared)
        if snapshot.level != expected_level:
            raise SnapshotError(
                f"level {snapshot.level} does not match {snapshot.lines_cleared} cleared lines (expected {expected_level})"
            )
        grid = GameGrid.from_flat(snapshot.board, session.config.width, session.config.height)
        piece = snapshot.current_piece
        if piece is not None and not grid.is_placeable(piece.shape(), piece.x, piece.y):
            raise SnapshotError("current piece overlaps the board or lies outside it")

        session.seed = snapshot.seed
        session._rng = random.Random(snapshot.seed)
        session.grid = grid
        session.score = snapshot.score
        session.level = snapshot.level
        session.lines_cleared = snapshot.lines_cleared
        session.hold_piece = snapshot.hold_piece
        if len(snapshot.next_queue) > session.config.preview_size:
            raise SnapshotError(
                f"nextQueue holds {len(snapshot.next_queue)} pieces, preview size is {session.config.preview_size}"
            )
        queue = list(snapshot.next_queue)
        while len(queue) < session.config.preview_size:
            queue.append(session._draw())
        session.next_queue = queue
        session.current_piece = piece
        session.status = SessionStatus(snapshot.status)
        session.replay.start()
        logger.info("Session restored (status=%s, score=%d)", snapshot.status, snapshot.score)
        if piece is None:
            session._spawn_next()
            session._flush()
        return session

    def pause(self) -> bool:
        if self.status is not SessionStatus.ACTIVE:
            logger.debug("pause ignored in status %s", self.status.value)
            return False
        self.status = SessionStatus.PAUSED
        return True

    def resume(self) -> bool:
        if self.status is not SessionStatus.PAUSED:
            logger.debug("resume ignored in status %s", self.status.value)
            return False
        self.status = SessionStatus.ACTIVE
        return True

    def finish(self) -> Optional[SessionSummary]:
        if self.status is SessionStatus.FINISHED:
            return self._summary
        if self.status not in (SessionStatus.ACTIVE, SessionStatus.PAUSED):
            logger.debug("finish ignored in status %s", self.status.value)
            return None
        self._end(SessionStatus.FINISHED)
        self._flush()
        return self._summary

    def abandon(self) -> Optional[SessionSummary]:
        if self.status is SessionStatus.ABANDONED:
            return self._summary
        if self.status not in (SessionStatus.ACTIVE, SessionStatus.PAUSED):
            logger.debug("abandon ignored in status %s", self.status.value)
            return None
        self._end(SessionStatus.ABANDONED)
        self._flush()
        return self._summary

    # ------------------------------------------------------------------
    # Player input and gravity
    # ------------------------------------------------------------------

    def move_left(self) -> CommandOutcome:
        return self._shift(-1, ActionCode.LEFT)

    def move_right(self) -> CommandOutcome:
        return self._shift(1, ActionCode.RIGHT)

    def soft_drop(self) -> CommandOutcome:
        return self._step_down(record=True)

    def tick(self) -> CommandOutcome:
        """Gravity: a downward step that is never written to the replay."""
        return self._step_down(record=False)

    def rotate(self) -> CommandOutcome:
        if not self._accepts_input("rotate"):
            return CommandOutcome.IGNORED
        result = self.controller.rotate(self.current_piece, self.grid)
        if result.outcome is MoveOutcome.REJECTED:
            return CommandOutcome.REJECTED
        self.current_piece = result.piece
        self.replay.record(ActionCode.ROTATE)
        return CommandOutcome.APPLIED

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def summary(self) -> Optional[SessionSummary]:
        return self._summary

    @property
    def is_over(self) -> bool:
        return self.status in (SessionStatus.FINISHED, SessionStatus.ABANDONED)

    @property
    def gravity_interval_ms(self) -> int:
        return self.rules.gravity_interval_ms(self.level)

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            status=self.status.value,
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared,
            board=tuple(self.grid.to_flat()),
            current_piece=self.current_piece,
            next_queue=tuple(self.next_queue),
            hold_piece=self.hold_piece,
            seed=self.seed,
        )

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.grid.clone_state()
        if self.current_piece is not None:
            for x, y in self.current_piece.cells():
                if self.grid.is_inside(x, y):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -int(self.current_piece.kind)
        return state

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _accepts_input(self, command: str) -> bool:
        if self.status is not SessionStatus.ACTIVE or self.current_piece is None:
            logger.debug("%s ignored in status %s", command, self.status.value)
            return False
        return True

    def _shift(self, dx: int, code: ActionCode) -> CommandOutcome:
        if not self._accepts_input(code.name.lower()):
            return CommandOutcome.IGNORED
        result = self.controller.move(self.current_piece, self.grid, dx, 0)
        if result.outcome is MoveOutcome.REJECTED:
            return CommandOutcome.REJECTED
        self.current_piece = result.piece
        self.replay.record(code)
        return CommandOutcome.APPLIED

    def _step_down(self, record: bool) -> CommandOutcome:
        if not self._accepts_input("soft_drop" if record else "tick"):
            return CommandOutcome.IGNORED
        result = self.controller.move(self.current_piece, self.grid, 0, 1)
        if result.outcome is MoveOutcome.MOVED:
            self.current_piece = result.piece
            if record:
                self.replay.record(ActionCode.DOWN)
            return CommandOutcome.APPLIED
        self._lock()
        self._flush()
        return CommandOutcome.LOCKED

    def _lock(self) -> None:
        piece = self.current_piece
        result = self.line_clear.lock(self.grid, piece, self.score, self.lines_cleared)
        self.grid = result.grid
        self.current_piece = None
        self.pieces_placed += 1
        self._pending.append(PieceLocked(board=tuple(result.merged.to_flat()), piece=piece.to_dict()))
        logger.debug("Locked %s at (%d, %d)", piece.kind.code, piece.x, piece.y)
        if result.cleared_count:
            self.score = result.score
            self.lines_cleared = result.lines_cleared
            self.level = result.level
            logger.debug(
                "Cleared %d row(s); score=%d level=%d lines=%d",
                result.cleared_count, self.score, self.level, self.lines_cleared,
            )
            self._pending.append(
                LinesCleared(
                    count=result.cleared_count,
                    rows=result.cleared_rows,
                    score=self.score,
                    level=self.level,
                    lines_cleared=self.lines_cleared,
                )
            )
        self._spawn_next()

    def _draw(self) -> TetrominoType:
        return self._rng.choice(list(TetrominoType))

    def _spawn_next(self) -> bool:
        kind = self.next_queue.pop(0)
        self.next_queue.append(self._draw())
        piece = self.controller.spawn(self.grid, kind)
        if piece is None:
            logger.info("Game over: no room to spawn %s (score=%d)", kind.code, self.score)
            self._end(SessionStatus.FINISHED, reason=BOARD_FULL)
            return False
        self.current_piece = piece
        return True

    def _end(self, status: SessionStatus, reason: Optional[str] = None) -> None:
        self.status = status
        self.game_over_reason = reason
        self._summary = SessionSummary(
            status=status.value,
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared,
            duration_ms=self.replay.elapsed_ms(),
            actions=self.replay.actions,
            game_over_reason=reason,
        )
        logger.info(
            "Session %s: score=%d level=%d lines=%d actions=%d",
            status.value, self.score, self.level, self.lines_cleared, len(self.replay),
        )
        if reason is not None:
            self._pending.append(GameOver(reason=reason))
        self._pending.append(SessionFinished(summary=self._summary))

    def _flush(self) -> None:
        # Commands issued by listeners only queue; the outermost flush drains in order.
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                self.events.publish(self._pending.pop(0))
        finally:
            self._dispatching = False
