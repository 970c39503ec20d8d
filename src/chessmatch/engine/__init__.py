"""Move proposer layer: budgets, strength levels and the UCI/Qt engine session.

The Qt modules (``qt_bridge``, ``session``) are imported explicitly so
that the protocol and budget models stay usable without an event loop.
"""

from chessmatch.engine.search import (
    EvaluationSample,
    MoveProposer,
    ProposalToken,
    ProposerListener,
    SearchBudget,
)
from chessmatch.engine.settings import EngineSettings
from chessmatch.engine.strength import (
    STRENGTH_LEVELS,
    StrengthLevel,
    search_budget,
    strength_level,
    thinking_floor,
)

__all__ = [
    "STRENGTH_LEVELS",
    "EngineSettings",
    "EvaluationSample",
    "MoveProposer",
    "ProposalToken",
    "ProposerListener",
    "SearchBudget",
    "StrengthLevel",
    "search_budget",
    "strength_level",
    "thinking_floor",
]
