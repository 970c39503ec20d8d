"""Abstract interfaces and configuration for the game layer.

The match controller depends on these definitions, not on concrete clock
or engine implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum, auto

from chessmatch.core.enums import MatchMode, Side
from chessmatch.engine.strength import MAX_STRENGTH, MIN_STRENGTH

# ── Match phase FSM states ───────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Finite-state-machine states for a match."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()  # a human is to move
    THINKING = auto()  # a proposer request is outstanding
    GAME_OVER = auto()
    FAULTED = auto()  # internal error, only a new game continues

    @property
    def is_live(self) -> bool:
        return self in (GamePhase.AWAITING_MOVE, GamePhase.THINKING)


# ── Time control presets ─────────────────────────────────────────────────────


class TimeControl:
    """Immutable time-control definition.

    Args:
        initial_seconds: Starting time per player.
        increment_seconds: Per-move increment (Fischer).
    """

    __slots__ = ("initial_seconds", "increment_seconds")

    def __init__(self, initial_seconds: float, increment_seconds: float = 0.0) -> None:
        if initial_seconds <= 0:
            raise ValueError("initial_seconds must be positive")
        if increment_seconds < 0:
            raise ValueError("increment_seconds must not be negative")
        self.initial_seconds = initial_seconds
        self.increment_seconds = increment_seconds

    @classmethod
    def bullet_1m(cls) -> TimeControl:
        return cls(60, 0)

    @classmethod
    def bullet_1m1s(cls) -> TimeControl:
        return cls(60, 1)

    @classmethod
    def blitz_3m(cls) -> TimeControl:
        return cls(180, 0)

    @classmethod
    def blitz_3m2s(cls) -> TimeControl:
        return cls(180, 2)

    @classmethod
    def blitz_5m(cls) -> TimeControl:
        return cls(300, 0)

    @classmethod
    def blitz_5m3s(cls) -> TimeControl:
        return cls(300, 3)

    @classmethod
    def rapid_10m(cls) -> TimeControl:
        return cls(600, 0)

    @classmethod
    def rapid_10m5s(cls) -> TimeControl:
        return cls(600, 5)

    @classmethod
    def rapid_15m10s(cls) -> TimeControl:
        return cls(900, 10)

    @classmethod
    def classical_30m(cls) -> TimeControl:
        return cls(1800, 0)

    @classmethod
    def unlimited(cls) -> TimeControl:
        """No time limit."""
        return cls(float("inf"), 0)

    @property
    def is_unlimited(self) -> bool:
        return self.initial_seconds == float("inf")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeControl):
            return NotImplemented
        return (self.initial_seconds, self.increment_seconds) == (
            other.initial_seconds,
            other.increment_seconds,
        )

    def __hash__(self) -> int:
        return hash((self.initial_seconds, self.increment_seconds))

    def __repr__(self) -> str:
        if self.is_unlimited:
            return "TimeControl(unlimited)"
        mins = self.initial_seconds / 60
        if self.increment_seconds:
            return f"TimeControl({mins:.0f}m+{self.increment_seconds:.0f}s)"
        return f"TimeControl({mins:.0f}m)"


TIME_CONTROL_PRESETS: dict[str, TimeControl] = {
    "Bullet 1+0": TimeControl.bullet_1m(),
    "Bullet 1+1": TimeControl.bullet_1m1s(),
    "Blitz 3+0": TimeControl.blitz_3m(),
    "Blitz 3+2": TimeControl.blitz_3m2s(),
    "Blitz 5+0": TimeControl.blitz_5m(),
    "Blitz 5+3": TimeControl.blitz_5m3s(),
    "Rapid 10+0": TimeControl.rapid_10m(),
    "Rapid 10+5": TimeControl.rapid_10m5s(),
    "Rapid 15+10": TimeControl.rapid_15m10s(),
    "Classical 30+0": TimeControl.classical_30m(),
}


# ── Match configuration ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class MatchConfig:
    """Side assignment and time control, fixed for one match."""

    mode: MatchMode = MatchMode.HUMAN_VS_COMPUTER
    human_side: Side = Side.WHITE
    strength: int = 5
    time_control: TimeControl = field(default_factory=TimeControl.rapid_10m)
    start_fen: str | None = None
    # Undo may reopen a match that ended by play (not by forfeit).
    allow_undo_after_result: bool = True

    def __post_init__(self) -> None:
        if not MIN_STRENGTH <= self.strength <= MAX_STRENGTH:
            raise ValueError(
                f"strength must be in {MIN_STRENGTH}..{MAX_STRENGTH}, got {self.strength}"
            )

    def is_computer(self, side: Side) -> bool:
        return self.mode == MatchMode.HUMAN_VS_COMPUTER and side != self.human_side

    @property
    def computer_side(self) -> Side | None:
        if self.mode != MatchMode.HUMAN_VS_COMPUTER:
            return None
        return self.human_side.opposite


# ── Abstract interfaces ─────────────────────────────────────────────────────


class IClock(ABC):
    """Interface for a chess clock."""

    @abstractmethod
    def start(self, side: Side) -> None:
        """Start the clock for *side*."""

    @abstractmethod
    def stop(self) -> None:
        """Pause the running clock."""

    @abstractmethod
    def tick(self, elapsed: float) -> None:
        """Charge *elapsed* seconds to the active side."""

    @abstractmethod
    def set_active(self, side: Side) -> None:
        """Make *side* the one whose time decreases."""

    @abstractmethod
    def remaining(self, side: Side) -> float:
        """Seconds remaining for *side*."""

    @abstractmethod
    def apply_increment(self, side: Side) -> None:
        """Add Fischer increment after a move."""
