from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from .errors import ReplayFormatError
from .models import ReplayActionModel, describe

Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ActionCode(str, Enum):
    LEFT = "L"
    RIGHT = "R"
    DOWN = "D"
    ROTATE = "ROT"


@dataclass(frozen=True)
class ReplayAction:
    t: int
    a: ActionCode
    p: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"t": self.t, "a": self.a.value}
        if self.p is not None:
            data["p"] = dict(self.p)
        return data


class ReplayRecorder:
    """Append-only log of player-initiated actions for one session.

    Timestamps are milliseconds since `start()`. The log is exposed verbatim
    and never truncated, reordered or deduplicated.
    """

    def __init__(self, clock: Clock = monotonic_ms) -> None:
        self._clock = clock
        self._started_at: Optional[float] = None
        self._actions: List[ReplayAction] = []

    @property
    def started(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        self._started_at = self._clock()
        self._actions = []

    def elapsed_ms(self) -> int:
        if self._started_at is None:
            return 0
        return max(0, int(self._clock() - self._started_at))

    def record(self, code: ActionCode, params: Optional[Mapping[str, Any]] = None) -> ReplayAction:
        t = self.elapsed_ms()
        if self._actions:
            # Clamp so a clock that steps backwards cannot reorder the log.
            t = max(t, self._actions[-1].t)
        action = ReplayAction(t=t, a=ActionCode(code), p=params)
        self._actions.append(action)
        return action

    @property
    def actions(self) -> Tuple[ReplayAction, ...]:
        return tuple(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def to_list(self) -> List[Dict[str, Any]]:
        return [action.to_dict() for action in self._actions]


_ACTION_LIST = TypeAdapter(List[ReplayActionModel])


def parse_replay_actions(items: Iterable[Mapping[str, Any]]) -> List[ReplayAction]:
    """Validate a persisted `[{t, a, p?}, ...]` list."""
    try:
        models = _ACTION_LIST.validate_python(items)
    except ValidationError as exc:
        raise ReplayFormatError(describe(exc)) from exc
    actions: List[ReplayAction] = []
    last_t = 0.0
    for index, model in enumerate(models):
        if model.t < last_t:
            raise ReplayFormatError(f"action {index} timestamp {model.t:g} precedes {last_t:g}")
        last_t = model.t
        actions.append(ReplayAction(t=int(model.t), a=ActionCode(model.a), p=model.p))
    return actions


@dataclass
class ReplayCursor:
    """Steps back and forth through a recorded action list, clamped at both ends."""

    actions: List[ReplayAction]
    duration_ms: int = 0
    index: int = field(default=0)

    @classmethod
    def from_record(cls, items: Iterable[Mapping[str, Any]], duration_ms: int = 0) -> "ReplayCursor":
        return cls(actions=parse_replay_actions(items), duration_ms=int(duration_ms))

    @property
    def current(self) -> Optional[ReplayAction]:
        if not self.actions:
            return None
        return self.actions[self.index]

    def next(self) -> Optional[ReplayAction]:
        if self.actions:
            self.index = min(len(self.actions) - 1, self.index + 1)
        return self.current

    def prev(self) -> Optional[ReplayAction]:
        self.index = max(0, self.index - 1)
        return self.current

    def seek(self, index: int) -> Optional[ReplayAction]:
        if self.actions:
            self.index = min(len(self.actions) - 1, max(0, index))
        return self.current

    @property
    def at_start(self) -> bool:
        return self.index == 0

    @property
    def at_end(self) -> bool:
        return not self.actions or self.index == len(self.actions) - 1
