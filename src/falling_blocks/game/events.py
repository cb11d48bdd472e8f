"""Events a GameSession emits for its collaborators.

Presentation and persistence layers subscribe here instead of reaching into
session state. Events raised while a command runs are dispatched after the
command has finished mutating the session, in the order they occurred.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple, Type

from .snapshot import SessionSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PieceLocked:
    board: Tuple[int, ...]  # flat W*H board with the piece merged, before clearing
    piece: Dict[str, Any]


@dataclass(frozen=True)
class LinesCleared:
    count: int
    rows: Tuple[int, ...]
    score: int
    level: int
    lines_cleared: int


@dataclass(frozen=True)
class GameOver:
    reason: str


@dataclass(frozen=True)
class SessionFinished:
    summary: SessionSummary


Event = Any
Listener = Callable[[Event], None]


class EventBus:
    """Synchronous publish/subscribe keyed by event class."""

    def __init__(self) -> None:
        self._subscribers: Dict[Type, List[Listener]] = defaultdict(list)
        self._catch_all: List[Listener] = []

    def subscribe(self, event_type: Type, callback: Listener) -> None:
        self._subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: Type, callback: Listener) -> bool:
        if callback in self._subscribers[event_type]:
            self._subscribers[event_type].remove(callback)
            return True
        return False

    def subscribe_all(self, callback: Listener) -> None:
        self._catch_all.append(callback)

    def publish(self, event: Event) -> int:
        """Deliver `event`; returns the number of listeners that completed."""
        invoked = 0
        for callback in list(self._subscribers[type(event)]) + list(self._catch_all):
            try:
                callback(event)
                invoked += 1
            except Exception:
                logger.exception("Event listener failed for %s", type(event).__name__)
        return invoked
