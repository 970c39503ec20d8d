"""Position oracle: the rules engine behind the match controller.

The controller never looks inside a :class:`Position`; it hands positions
and moves to a :class:`PositionOracle` and gets back new positions and
terminal verdicts. :class:`ChessOracle` implements the protocol on top of
python-chess.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Protocol

import chess

from chessmatch.core.enums import EndReason, Side
from chessmatch.core.errors import IllegalMoveError


class Position:
    """Immutable chess position, including the moves that led to it.

    The move stack is kept so that repetition draws can be judged from
    the position alone.
    """

    __slots__ = ("_board",)

    def __init__(self, board: chess.Board) -> None:
        self._board = board

    @property
    def fen(self) -> str:
        return self._board.fen()

    @property
    def ply(self) -> int:
        """Half-moves played since the starting position."""
        return len(self._board.move_stack)

    def board(self) -> chess.Board:
        """Return a private copy of the underlying board."""
        return self._board.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.fen == other.fen and self._board.move_stack == other._board.move_stack

    def __hash__(self) -> int:
        return hash((self.fen, self.ply))

    def __repr__(self) -> str:
        return f"Position({self.fen!r})"


class TerminalKind(IntEnum):
    ONGOING = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW = auto()


@dataclass(frozen=True, slots=True)
class TerminalStatus:
    """Verdict of the oracle for one position."""

    kind: TerminalKind
    winner: Side | None = None
    reason: EndReason | None = None

    @property
    def is_over(self) -> bool:
        return self.kind != TerminalKind.ONGOING


ONGOING = TerminalStatus(TerminalKind.ONGOING)


class PositionOracle(Protocol):
    """Rules engine contract used by the match controller."""

    def initial_position(self, fen: str | None = None) -> Position: ...

    def is_legal(self, position: Position, move: chess.Move) -> bool: ...

    def apply(self, position: Position, move: chess.Move) -> Position: ...

    def terminal_status(self, position: Position) -> TerminalStatus: ...

    def side_to_move(self, position: Position) -> Side: ...

    def san(self, position: Position, move: chess.Move) -> str: ...

    def legal_moves(self, position: Position) -> list[chess.Move]: ...


_TERMINATION_MAP: dict[chess.Termination, EndReason] = {
    chess.Termination.CHECKMATE: EndReason.CHECKMATE,
    chess.Termination.STALEMATE: EndReason.STALEMATE,
    chess.Termination.INSUFFICIENT_MATERIAL: EndReason.INSUFFICIENT_MATERIAL,
    chess.Termination.FIVEFOLD_REPETITION: EndReason.THREEFOLD_REPETITION,
    chess.Termination.SEVENTYFIVE_MOVES: EndReason.FIFTY_MOVE,
}


class ChessOracle:
    """python-chess backed :class:`PositionOracle`.

    A threefold repetition or a fifty-move count that has actually been
    reached ends the game without a claim.
    """

    __slots__ = ()

    def initial_position(self, fen: str | None = None) -> Position:
        board = chess.Board(fen) if fen else chess.Board()
        return Position(board)

    def is_legal(self, position: Position, move: chess.Move) -> bool:
        return position._board.is_legal(move)

    def apply(self, position: Position, move: chess.Move) -> Position:
        if not position._board.is_legal(move):
            raise IllegalMoveError(move.uci(), position.fen)
        board = position.board()
        board.push(move)
        return Position(board)

    def terminal_status(self, position: Position) -> TerminalStatus:
        board = position._board
        outcome = board.outcome()
        if outcome is None:
            # Only a repetition or move count already on the board ends the game.
            if board.is_repetition(3):
                return TerminalStatus(
                    TerminalKind.DRAW, None, EndReason.THREEFOLD_REPETITION
                )
            if board.is_fifty_moves():
                return TerminalStatus(TerminalKind.DRAW, None, EndReason.FIFTY_MOVE)
            return ONGOING

        reason = _TERMINATION_MAP.get(outcome.termination)
        if reason is None:
            # Variant terminations never occur on a standard board.
            return ONGOING
        if reason == EndReason.CHECKMATE:
            assert outcome.winner is not None
            return TerminalStatus(
                TerminalKind.CHECKMATE, Side.from_chess(outcome.winner), reason
            )
        if reason == EndReason.STALEMATE:
            return TerminalStatus(TerminalKind.STALEMATE, None, reason)
        return TerminalStatus(TerminalKind.DRAW, None, reason)

    def side_to_move(self, position: Position) -> Side:
        return Side.from_chess(position._board.turn)

    # ── Helpers for the human-facing layer ───────────────────────────────

    def san(self, position: Position, move: chess.Move) -> str:
        return position._board.san(move)

    def parse_move(self, position: Position, text: str) -> chess.Move | None:
        """Parse *text* as UCI or SAN. Returns ``None`` when unparseable or illegal."""
        board = position._board
        try:
            move = chess.Move.from_uci(text)
        except ValueError:
            try:
                return board.parse_san(text)
            except ValueError:
                return None
        return move if board.is_legal(move) else None

    def legal_moves(self, position: Position) -> list[chess.Move]:
        return list(position._board.legal_moves)

    def is_promotion(
        self, position: Position, from_square: chess.Square, to_square: chess.Square
    ) -> bool:
        """True when moving *from_square* to *to_square* needs a promotion piece."""
        board = position._board
        return board.is_legal(chess.Move(from_square, to_square, chess.QUEEN))

    def is_check(self, position: Position) -> bool:
        return position._board.is_check()
