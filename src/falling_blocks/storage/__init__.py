"""Record storage collaborators for finished and in-progress games."""

from .memory_store import (
    GameRecord,
    LeaderboardEntry,
    MemoryGameStore,
    ReplayRecord,
    SessionRecorder,
)

__all__ = [
    "GameRecord",
    "LeaderboardEntry",
    "MemoryGameStore",
    "ReplayRecord",
    "SessionRecorder",
]
