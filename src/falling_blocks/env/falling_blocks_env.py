from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import CommandOutcome, GameConfig, GameSession, ScoringRules, TetrominoType


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    SOFT_DROP = 2
    ROTATE = 3
    NONE = 4


PALETTE = {
    0: (20, 20, 26),
    1: (0, 240, 240),  # I
    2: (240, 240, 0),  # O
    3: (160, 0, 240),  # T
    4: (0, 240, 0),    # S
    5: (240, 0, 0),    # Z
    6: (0, 0, 240),    # J
    7: (240, 160, 0),  # L
}


class FallingBlocksEnv(gym.Env):
    """Drives a GameSession one input plus one gravity tick per step.

    Replay timestamps come from a simulated clock that advances by the
    current gravity interval every step, so seeded episodes are reproducible.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        render_mode: Optional[str] = None,
        max_episode_steps: int = 10000,
        invalid_action_penalty: float = 0.0,
        terminal_penalty: float = 0.0,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)

        h, w = self.config.height, self.config.width
        n_types = len(TetrominoType)
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_types, high=n_types, shape=(h, w), dtype=np.int8),
                "next": spaces.Box(low=1, high=n_types, shape=(self.config.preview_size,), dtype=np.int8),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._sim_ms = 0
        self._steps = 0
        self.session = self._new_session()

    def _clock(self) -> float:
        return float(self._sim_ms)

    def _new_session(self) -> GameSession:
        return GameSession(self.config, self.rules, clock=self._clock)

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "board": self.session.get_state().astype(np.int8),
            "next": np.array([int(t) for t in self.session.next_queue], dtype=np.int8),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.session.score,
            "level": self.session.level,
            "lines_cleared": self.session.lines_cleared,
            "pieces_placed": self.session.pieces_placed,
            "holes": self.session.grid.count_holes(),
            "max_height": self.session.grid.get_max_height(),
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self._sim_ms = 0
        self._steps = 0
        self.session = self._new_session()
        # Draw the session seed from the env RNG so gym seeding controls the piece sequence.
        self.session.start(seed=int(self.np_random.integers(0, 2**31 - 1)))
        return self._get_obs(), self._get_info()

    def _apply(self, action: Action) -> CommandOutcome:
        if action == Action.LEFT:
            return self.session.move_left()
        if action == Action.RIGHT:
            return self.session.move_right()
        if action == Action.SOFT_DROP:
            return self.session.soft_drop()
        if action == Action.ROTATE:
            return self.session.rotate()
        return CommandOutcome.IGNORED

    def step(self, action: int):
        action = Action(int(action))
        score_before = self.session.score

        outcome = self._apply(action)
        self._sim_ms += self.session.gravity_interval_ms
        self.session.tick()
        self._steps += 1

        reward = float(self.session.score - score_before)
        if outcome is CommandOutcome.REJECTED:
            reward += self.invalid_action_penalty
        terminated = self.session.is_over
        if terminated:
            reward += self.terminal_penalty
        truncated = not terminated and self._steps >= self.max_episode_steps

        info = self._get_info()
        info["outcome"] = outcome.value
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            # human rendering lives in falling_blocks.visualization
            return None
        state = self.session.get_state()
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                color = PALETTE[abs(int(state[y, x]))]
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
