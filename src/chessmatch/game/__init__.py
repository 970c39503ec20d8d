"""Match management layer: controller, clock, state snapshots.

Quick start::

    from chessmatch.core import ChessOracle, MatchMode, Side
    from chessmatch.engine.session import EngineSession
    from chessmatch.game import MatchConfig, MatchController, TimeControl

    ctrl = MatchController(ChessOracle(), EngineSession())
    ctrl.new_game(
        MatchConfig(
            mode=MatchMode.HUMAN_VS_COMPUTER,
            human_side=Side.BLACK,
            time_control=TimeControl.blitz_5m(),
        )
    )
"""

from chessmatch.game.clock import Clock, ClockSnapshot
from chessmatch.game.controller import MatchController, MatchEvents
from chessmatch.game.interfaces import (
    TIME_CONTROL_PRESETS,
    GamePhase,
    IClock,
    MatchConfig,
    TimeControl,
)
from chessmatch.game.state import MatchFault, MatchResult, MatchState, MoveRecord

__all__ = [
    # Interfaces
    "GamePhase",
    "IClock",
    "MatchConfig",
    "TIME_CONTROL_PRESETS",
    "TimeControl",
    # Concrete
    "Clock",
    "ClockSnapshot",
    "MatchController",
    "MatchEvents",
    "MatchFault",
    "MatchResult",
    "MatchState",
    "MoveRecord",
]
