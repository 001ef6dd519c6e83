"""Core data models shared across the trainer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from sightkey.config import (
    BLACK_KEY_HEIGHT,
    BLACK_KEY_WIDTH,
    KEY_GAP,
    WHITE_KEY_HEIGHT,
    WHITE_KEY_WIDTH,
)
from sightkey.note import Note


class Staff(Enum):
    TREBLE = auto()
    BASS = auto()


class SessionPhase(Enum):
    IDLE = auto()
    AWAITING_INPUT = auto()
    SHOWING_RESULT = auto()


@dataclass(frozen=True)
class KeyGeometryConfig:
    """Key sizes for the on-screen keyboard, in layout units."""

    white_key_width: float = WHITE_KEY_WIDTH
    white_key_height: float = WHITE_KEY_HEIGHT
    key_gap: float = KEY_GAP  # space between neighbouring white keys
    black_key_width: float = BLACK_KEY_WIDTH
    black_key_height: float = BLACK_KEY_HEIGHT

    def __post_init__(self) -> None:
        for field_name in (
            "white_key_width",
            "white_key_height",
            "black_key_width",
            "black_key_height",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be positive")
        if self.key_gap < 0:
            raise ValueError("key_gap must not be negative")

    @property
    def octave_width(self) -> float:
        return 7 * self.white_key_width + 6 * self.key_gap


@dataclass(frozen=True)
class PositionedNote:
    note: Note
    x: float  # distance from the left edge of C-1
    width: float
    height: float
    stack_order: int  # 1 = black key, drawn and hit-tested above white keys

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class SessionState:
    """Score snapshot handed to the presentation layer."""

    target_note: Note | None = None
    total_attempts: int = 0
    correct_attempts: int = 0

    @property
    def accuracy_pct(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return round(self.correct_attempts / self.total_attempts * 100.0, 1)


@dataclass(frozen=True)
class AttemptResult:
    played: Note
    target: Note
    is_correct: bool
    strict: bool

    @property
    def message(self) -> str:
        prefix = "CORRECT NOTE" if self.is_correct else "WRONG NOTE"
        return f"{prefix}: {self.target.full_name}"
