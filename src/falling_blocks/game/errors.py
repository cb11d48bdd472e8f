"""Exception hierarchy for falling_blocks.

Gameplay conditions (rejected moves, locks, a full board) are reported as
return values and events. The exceptions below are reserved for malformed
data and misconfiguration, which abort construction rather than gameplay.
"""

from __future__ import annotations

__all__ = [
    "FallingBlocksError",
    "ConfigurationError",
    "PieceDataError",
    "SnapshotError",
    "ReplayFormatError",
    "RecordNotFoundError",
]


class FallingBlocksError(Exception):
    """Base exception for all falling_blocks errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
    """

    code: str = "FALLING_BLOCKS_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(FallingBlocksError):
    code = "CONFIGURATION_ERROR"


class PieceDataError(FallingBlocksError):
    code = "PIECE_DATA_ERROR"


class SnapshotError(FallingBlocksError):
    code = "SNAPSHOT_ERROR"


class ReplayFormatError(FallingBlocksError):
    code = "REPLAY_FORMAT_ERROR"


class RecordNotFoundError(FallingBlocksError):
    code = "RECORD_NOT_FOUND"
