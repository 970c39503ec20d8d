"""Core domain layer: sides, results and the rules oracle.

Quick start::

    import chess
    from chessmatch.core import ChessOracle

    oracle = ChessOracle()
    pos = oracle.initial_position()
    pos = oracle.apply(pos, chess.Move.from_uci("e2e4"))
    print(oracle.side_to_move(pos), oracle.terminal_status(pos))
"""

from chessmatch.core.enums import EndReason, FaultKind, MatchMode, Side
from chessmatch.core.errors import (
    ChessMatchError,
    EngineError,
    IllegalMoveError,
)
from chessmatch.core.oracle import (
    ChessOracle,
    Position,
    PositionOracle,
    TerminalKind,
    TerminalStatus,
)

__all__ = [
    "ChessMatchError",
    "ChessOracle",
    "EndReason",
    "EngineError",
    "FaultKind",
    "IllegalMoveError",
    "MatchMode",
    "Position",
    "PositionOracle",
    "Side",
    "TerminalKind",
    "TerminalStatus",
]
