"""Exception hierarchy for chessmatch."""

from __future__ import annotations


class ChessMatchError(Exception):
    """Base class for all chessmatch errors."""


class IllegalMoveError(ChessMatchError):
    """The rules oracle rejected a move for the given position."""

    def __init__(self, move: str, fen: str) -> None:
        super().__init__(f"Illegal move {move} in position {fen}")
        self.move = move
        self.fen = fen


class EngineError(ChessMatchError):
    """The search engine failed or could not be started."""
