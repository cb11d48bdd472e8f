from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationError


@dataclass(frozen=True)
class ScoringRules:
    """Flat per-row scoring, level progression and the gravity curve."""

    points_per_line: int = 100
    lines_per_level: int = 10
    base_interval_ms: int = 1000
    interval_step_ms: int = 100
    min_interval_ms: int = 200

    def __post_init__(self) -> None:
        if self.points_per_line < 0:
            raise ConfigurationError("points_per_line must be non-negative")
        if self.lines_per_level <= 0:
            raise ConfigurationError("lines_per_level must be positive")
        if self.min_interval_ms <= 0 or self.base_interval_ms < self.min_interval_ms:
            raise ConfigurationError("gravity intervals must satisfy 0 < min_interval_ms <= base_interval_ms")

    def score_for_lines(self, lines: int) -> int:
        # No combo or multi-line multiplier.
        return max(0, lines) * self.points_per_line

    def level_for_lines(self, lines_cleared: int) -> int:
        return lines_cleared // self.lines_per_level + 1

    def gravity_interval_ms(self, level: int) -> int:
        return max(self.min_interval_ms, self.base_interval_ms - (level - 1) * self.interval_step_ms)
