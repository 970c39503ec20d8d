"""Shared move-proposer models and protocols."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NewType, Protocol

ProposalToken = NewType("ProposalToken", int)


@dataclass(slots=True, frozen=True)
class SearchBudget:
    """Constraints for a single computer move.

    ``min_time_ms`` is the thinking floor: the engine is told to spend at
    least that long and the controller never commits the answer earlier.
    Clock fields are optional and let the engine pace itself.
    """

    skill_level: int = 20
    time_ms: int = 1000
    min_time_ms: int = 0
    depth: int | None = None
    white_clock_ms: int | None = None
    black_clock_ms: int | None = None
    increment_ms: int = 0

    def reduced(self) -> SearchBudget:
        """Half the time budget, never below the floor."""
        return replace(self, time_ms=max(self.min_time_ms, self.time_ms // 2, 1))

    @property
    def time_seconds(self) -> float:
        return self.time_ms / 1000.0

    @property
    def floor_seconds(self) -> float:
        return self.min_time_ms / 1000.0


@dataclass(slots=True, frozen=True)
class EvaluationSample:
    """One score reported while searching, relative to White.

    Exactly one of ``score_cp`` / ``mate`` is set. Positive values favour
    White; ``mate`` is the signed number of moves to mate.
    """

    score_cp: int | None = None
    mate: int | None = None
    depth: int = 0

    @property
    def is_mate(self) -> bool:
        return self.mate is not None

    def as_centipawns(self, mate_score: int = 100_000) -> int:
        """Collapse mate scores onto a large centipawn value."""
        if self.mate is not None:
            sign = 1 if self.mate > 0 else -1
            return sign * (mate_score - abs(self.mate))
        return self.score_cp or 0


class ProposerListener(Protocol):
    """Receives asynchronous proposer events (implemented by the controller)."""

    def on_proposal(self, token: ProposalToken, uci: str | None) -> None: ...

    def on_evaluation(self, token: ProposalToken, sample: EvaluationSample) -> None: ...

    def on_proposal_error(self, token: ProposalToken, message: str) -> None: ...


class MoveProposer(Protocol):
    """Asynchronous move search contract used by the match controller."""

    def bind(self, listener: ProposerListener) -> None: ...

    def request_move(self, fen: str, budget: SearchBudget) -> ProposalToken: ...

    def cancel(self, token: ProposalToken) -> None: ...
