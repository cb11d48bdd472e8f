from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from falling_blocks.game import (
    GameSession,
    GameSnapshot,
    PieceLocked,
    RecordNotFoundError,
    SessionFinished,
    SessionSummary,
)

logger = logging.getLogger(__name__)

GAME_STATUSES = ("active", "paused", "finished", "abandoned")


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class GameRecord:
    game_id: str
    snapshot: Dict[str, Any]
    user_id: Optional[str] = None
    public: bool = False
    replay_id: Optional[str] = None
    updated_at: int = 0

    @property
    def status(self) -> str:
        return self.snapshot["status"]

    @property
    def score(self) -> int:
        return self.snapshot["score"]


@dataclass(frozen=True)
class ReplayRecord:
    replay_id: str
    game_id: str
    actions: List[Dict[str, Any]]
    duration_ms: int
    user_id: Optional[str] = None
    created_at: int = 0


@dataclass(frozen=True)
class LeaderboardEntry:
    entry_id: str
    user_id: str
    score: int
    level: int
    lines_cleared: int
    created_at: int = 0


@dataclass
class MemoryGameStore:
    """In-process stand-in for the game, replay and leaderboard records.

    Records are stored as the plain dict shapes the core hands out, so what
    goes in is exactly what a remote data service would receive.
    """

    clock: Callable[[], int] = _now_ms
    games: Dict[str, GameRecord] = field(default_factory=dict)
    replays: Dict[str, ReplayRecord] = field(default_factory=dict)
    leaderboard: Dict[str, LeaderboardEntry] = field(default_factory=dict)
    _ids: Iterator[int] = field(default_factory=itertools.count)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._ids)}"

    # Games -----------------------------------------------------------

    def create_game(self, snapshot: GameSnapshot, user_id: Optional[str] = None, public: bool = False) -> str:
        game_id = self._next_id("game")
        self.games[game_id] = GameRecord(
            game_id=game_id,
            snapshot=snapshot.to_dict(),
            user_id=user_id,
            public=public,
            updated_at=self.clock(),
        )
        logger.debug("Created %s for user %s", game_id, user_id)
        return game_id

    def get_game(self, game_id: str) -> GameRecord:
        try:
            return self.games[game_id]
        except KeyError:
            raise RecordNotFoundError(f"game {game_id} not found") from None

    def patch_game(self, game_id: str, snapshot: GameSnapshot) -> GameRecord:
        record = self.get_game(game_id)
        record.snapshot = snapshot.to_dict()
        record.updated_at = self.clock()
        return record

    def set_status(self, game_id: str, status: str) -> GameRecord:
        if status not in GAME_STATUSES:
            raise ValueError(f"unknown game status {status!r}")
        record = self.get_game(game_id)
        record.snapshot = dict(record.snapshot, status=status)
        record.updated_at = self.clock()
        return record

    def finish_game(self, game_id: str, summary: SessionSummary, user_id: Optional[str] = None) -> GameRecord:
        record = self.get_game(game_id)
        final_user = user_id or record.user_id
        now = self.clock()
        actions = summary.replay_actions()
        if actions:
            replay_id = self._next_id("replay")
            self.replays[replay_id] = ReplayRecord(
                replay_id=replay_id,
                game_id=game_id,
                actions=actions,
                duration_ms=summary.duration_ms,
                user_id=final_user,
                created_at=now,
            )
            record.replay_id = replay_id
        record.user_id = final_user
        record.snapshot = dict(
            record.snapshot,
            status=summary.status,
            score=summary.score,
            level=summary.level,
            linesCleared=summary.lines_cleared,
        )
        record.updated_at = now
        if final_user is not None and summary.status == "finished":
            entry_id = self._next_id("entry")
            self.leaderboard[entry_id] = LeaderboardEntry(
                entry_id=entry_id,
                user_id=final_user,
                score=summary.score,
                level=summary.level,
                lines_cleared=summary.lines_cleared,
                created_at=now,
            )
        logger.info("Stored %s %s with score %d", summary.status, game_id, summary.score)
        return record

    def delete_game(self, game_id: str) -> None:
        self.get_game(game_id)
        del self.games[game_id]

    def list_games_by_user(self, user_id: str, status: Optional[str] = None) -> List[GameRecord]:
        games = [g for g in self.games.values() if g.user_id == user_id]
        if status:
            games = [g for g in games if g.status == status]
        return games

    def list_public_finished_games(self, limit: Optional[int] = None) -> List[GameRecord]:
        games = [g for g in self.games.values() if g.public and g.status == "finished"]
        return games[:limit] if limit is not None else games

    # Replays ---------------------------------------------------------

    def get_replay(self, replay_id: str) -> ReplayRecord:
        try:
            return self.replays[replay_id]
        except KeyError:
            raise RecordNotFoundError(f"replay {replay_id} not found") from None

    def list_replays_by_game(self, game_id: str) -> List[ReplayRecord]:
        return [r for r in self.replays.values() if r.game_id == game_id]

    def recent_replays(self, limit: Optional[int] = None) -> List[ReplayRecord]:
        # Newest first; later inserts win ties.
        ordered = sorted(reversed(list(self.replays.values())), key=lambda r: r.created_at, reverse=True)
        return ordered[:limit] if limit is not None else ordered

    # Leaderboard -----------------------------------------------------

    def top_leaderboard(self, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        ordered = sorted(self.leaderboard.values(), key=lambda e: e.score, reverse=True)
        return ordered[:limit] if limit is not None else ordered

    def prune_leaderboard(self, max_age_ms: int) -> int:
        cutoff = self.clock() - max_age_ms
        stale = [k for k, e in self.leaderboard.items() if e.created_at < cutoff]
        for key in stale:
            del self.leaderboard[key]
        return len(stale)


class SessionRecorder:
    """Persists a session's progress by listening to its events."""

    def __init__(
        self,
        session: GameSession,
        store: MemoryGameStore,
        user_id: Optional[str] = None,
        public: bool = False,
    ) -> None:
        self.session = session
        self.store = store
        self.user_id = user_id
        self.game_id = store.create_game(session.snapshot(), user_id=user_id, public=public)
        session.events.subscribe(PieceLocked, self._on_piece_locked)
        session.events.subscribe(SessionFinished, self._on_finished)
        # A session restored onto a full board has already ended and emitted its events.
        if session.summary is not None:
            self.store.finish_game(self.game_id, session.summary, user_id=user_id)

    def _on_piece_locked(self, event: PieceLocked) -> None:
        self.store.patch_game(self.game_id, self.session.snapshot())

    def _on_finished(self, event: SessionFinished) -> None:
        self.store.patch_game(self.game_id, self.session.snapshot())
        self.store.finish_game(self.game_id, event.summary, user_id=self.user_id)

    def detach(self) -> None:
        self.session.events.unsubscribe(PieceLocked, self._on_piece_locked)
        self.session.events.unsubscribe(SessionFinished, self._on_finished)
