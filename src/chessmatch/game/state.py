"""Match state snapshots: the externally observable view of a match.

Everything here is frozen. The controller builds a fresh
:class:`MatchState` whenever it is asked; readers never see a partially
committed move.
"""

from __future__ import annotations

from dataclasses import dataclass

from chessmatch.core.enums import EndReason, FaultKind, Side
from chessmatch.engine.search import EvaluationSample
from chessmatch.game.interfaces import GamePhase, MatchConfig


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single committed ply."""

    uci: str
    san: str
    side: Side
    fen_after: str
    by_computer: bool = False
    think_seconds: float = 0.0


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Final outcome of a match. ``winner`` is ``None`` for draws."""

    winner: Side | None
    reason: EndReason

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def score(self) -> str:
        """PGN-style result string."""
        if self.winner is None:
            return "1/2-1/2"
        return "1-0" if self.winner == Side.WHITE else "0-1"

    def __str__(self) -> str:
        if self.winner is None:
            return f"draw by {self.reason}"
        return f"{self.winner} wins by {self.reason}"


@dataclass(frozen=True, slots=True)
class MatchFault:
    """An internal failure; not a chess result."""

    kind: FaultKind
    message: str


@dataclass(frozen=True, slots=True)
class MatchState:
    """Authoritative snapshot of one match."""

    config: MatchConfig
    phase: GamePhase
    fen: str
    start_fen: str
    active_side: Side
    white_remaining: float
    black_remaining: float
    thinking: bool
    evaluation: EvaluationSample | None
    result: MatchResult | None
    fault: MatchFault | None
    move_history: tuple[MoveRecord, ...]

    def remaining(self, side: Side) -> float:
        return self.white_remaining if side == Side.WHITE else self.black_remaining

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def is_live(self) -> bool:
        return self.phase.is_live

    @property
    def ply_count(self) -> int:
        """Number of half-moves played."""
        return len(self.move_history)

    @property
    def fullmove_display(self) -> int:
        """Current full-move number for display."""
        return (self.ply_count // 2) + 1
