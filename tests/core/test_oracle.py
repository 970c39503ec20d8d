"""Tests for the python-chess position oracle."""

import chess
import pytest

from chessmatch.core.enums import EndReason, Side
from chessmatch.core.errors import IllegalMoveError
from chessmatch.core.oracle import ONGOING, ChessOracle, TerminalKind


@pytest.fixture()
def oracle() -> ChessOracle:
    return ChessOracle()


def _play(oracle: ChessOracle, ucis: list[str], fen: str | None = None):
    pos = oracle.initial_position(fen)
    for uci in ucis:
        pos = oracle.apply(pos, chess.Move.from_uci(uci))
    return pos


class TestApply:
    def test_start_position(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        assert pos.fen == chess.STARTING_FEN
        assert oracle.side_to_move(pos) == Side.WHITE
        assert pos.ply == 0

    def test_apply_returns_new_position(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        after = oracle.apply(pos, chess.Move.from_uci("e2e4"))
        assert pos.fen == chess.STARTING_FEN
        assert after.fen != pos.fen
        assert after.ply == 1
        assert oracle.side_to_move(after) == Side.BLACK

    def test_illegal_move_raises(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        with pytest.raises(IllegalMoveError):
            oracle.apply(pos, chess.Move.from_uci("e2e5"))
        assert pos.fen == chess.STARTING_FEN

    def test_opponent_piece_is_illegal(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        assert not oracle.is_legal(pos, chess.Move.from_uci("e7e5"))

    def test_board_copy_is_private(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        board = pos.board()
        board.push_uci("e2e4")
        assert pos.fen == chess.STARTING_FEN

    def test_positions_compare_by_history(self, oracle: ChessOracle) -> None:
        a = _play(oracle, ["e2e4"])
        b = _play(oracle, ["e2e4"])
        assert a == b
        assert a != oracle.initial_position()


class TestTerminalStatus:
    def test_ongoing(self, oracle: ChessOracle) -> None:
        status = oracle.terminal_status(oracle.initial_position())
        assert status.kind == TerminalKind.ONGOING
        assert not status.is_over

    def test_checkmate(self, oracle: ChessOracle) -> None:
        pos = _play(oracle, ["f2f3", "e7e5", "g2g4", "d8h4"])
        status = oracle.terminal_status(pos)
        assert status.kind == TerminalKind.CHECKMATE
        assert status.winner == Side.BLACK
        assert status.reason == EndReason.CHECKMATE

    def test_stalemate(self, oracle: ChessOracle) -> None:
        pos = _play(oracle, ["b5b6"], fen="k7/8/8/1Q6/8/8/8/7K w - - 0 1")
        status = oracle.terminal_status(pos)
        assert status.kind == TerminalKind.STALEMATE
        assert status.winner is None
        assert status.reason == EndReason.STALEMATE

    def test_insufficient_material(self, oracle: ChessOracle) -> None:
        pos = _play(oracle, ["a1b2"], fen="k7/8/8/8/8/8/1p6/K7 w - - 0 1")
        status = oracle.terminal_status(pos)
        assert status.kind == TerminalKind.DRAW
        assert status.reason == EndReason.INSUFFICIENT_MATERIAL

    def test_threefold_repetition(self, oracle: ChessOracle) -> None:
        shuffle = ["g1f3", "g8f6", "f3g1", "f6g8"]
        pos = _play(oracle, shuffle * 2)
        status = oracle.terminal_status(pos)
        assert status.kind == TerminalKind.DRAW
        assert status.reason == EndReason.THREEFOLD_REPETITION

    def test_fifty_move_rule(self, oracle: ChessOracle) -> None:
        pos = _play(oracle, ["e1e2"], fen="8/8/8/8/8/8/k7/4K2R w - - 99 80")
        status = oracle.terminal_status(pos)
        assert status.kind == TerminalKind.DRAW
        assert status.reason == EndReason.FIFTY_MOVE

    def test_repetition_one_move_away_is_ongoing(self, oracle: ChessOracle) -> None:
        shuffle = ["g1f3", "g8f6", "f3g1", "f6g8"]
        pos = _play(oracle, shuffle + shuffle[:3])
        # Black's f6g8 would repeat the position a third time.
        assert oracle.terminal_status(pos) == ONGOING

    def test_ninety_nine_halfmoves_is_ongoing(self, oracle: ChessOracle) -> None:
        pos = _play(oracle, ["a2b2"], fen="7k/8/8/8/8/8/R7/K7 w - - 98 80")
        assert pos.board().halfmove_clock == 99
        assert oracle.terminal_status(pos) == ONGOING


class TestHelpers:
    def test_parse_uci_and_san(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        assert oracle.parse_move(pos, "e2e4") == chess.Move.from_uci("e2e4")
        assert oracle.parse_move(pos, "Nf3") == chess.Move.from_uci("g1f3")

    def test_parse_rejects_illegal(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        assert oracle.parse_move(pos, "e2e5") is None
        assert oracle.parse_move(pos, "Qh5") is None
        assert oracle.parse_move(pos, "nonsense") is None

    def test_san(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position()
        assert oracle.san(pos, chess.Move.from_uci("g1f3")) == "Nf3"

    def test_legal_moves(self, oracle: ChessOracle) -> None:
        assert len(oracle.legal_moves(oracle.initial_position())) == 20

    def test_is_promotion(self, oracle: ChessOracle) -> None:
        pos = oracle.initial_position("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        assert oracle.is_promotion(pos, chess.E7, chess.E8)
        assert not oracle.is_promotion(pos, chess.E1, chess.E2)

    def test_is_check(self, oracle: ChessOracle) -> None:
        pos = _play(oracle, ["e2e4", "f7f6", "d1h5"])
        assert oracle.is_check(pos)
