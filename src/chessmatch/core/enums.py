"""Core enumerations for the match domain."""

from __future__ import annotations

from enum import IntEnum, auto

import chess


class Side(IntEnum):
    """Side color."""

    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Side:
        return Side(1 - self.value)

    @property
    def chess_color(self) -> chess.Color:
        """The python-chess color (``True`` for White)."""
        return self is Side.WHITE

    @classmethod
    def from_chess(cls, color: chess.Color) -> Side:
        return cls.WHITE if color else cls.BLACK

    def __str__(self) -> str:
        return self.name.lower()


class MatchMode(IntEnum):
    """Who controls each side."""

    HUMAN_VS_HUMAN = auto()
    HUMAN_VS_COMPUTER = auto()


class EndReason(IntEnum):
    """Why a match ended."""

    CHECKMATE = auto()
    STALEMATE = auto()
    THREEFOLD_REPETITION = auto()
    INSUFFICIENT_MATERIAL = auto()
    FIFTY_MOVE = auto()
    TIME_FORFEIT = auto()
    FORFEIT = auto()

    @property
    def is_draw(self) -> bool:
        return self in _DRAW_REASONS

    @property
    def is_forfeit(self) -> bool:
        return self in (EndReason.TIME_FORFEIT, EndReason.FORFEIT)

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


_DRAW_REASONS = frozenset(
    {
        EndReason.STALEMATE,
        EndReason.THREEFOLD_REPETITION,
        EndReason.INSUFFICIENT_MATERIAL,
        EndReason.FIFTY_MOVE,
    }
)


class FaultKind(IntEnum):
    """Internal failures that stop a match without a chess result."""

    ORACLE_CONTRADICTION = auto()
    ENGINE_FAILURE = auto()
    ENGINE_UNRESPONSIVE = auto()
