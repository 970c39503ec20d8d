"""Read-only formatting of match state: PGN export, clock and score text."""

from __future__ import annotations

import datetime
import math

import chess
import chess.pgn

from chessmatch.core.enums import EndReason
from chessmatch.engine.search import EvaluationSample
from chessmatch.game.state import MatchState

# Logistic scale used to turn centipawns into a win probability.
_WIN_PROBABILITY_K = 0.0043


def match_to_pgn(
    state: MatchState,
    *,
    white: str = "White",
    black: str = "Black",
    event: str = "Casual game",
    date: datetime.date | None = None,
) -> str:
    """Export the committed move history as PGN text."""
    game = chess.pgn.Game()
    board = chess.Board(state.start_fen)
    if state.start_fen != chess.STARTING_FEN:
        game.setup(board)

    date = date or datetime.date.today()
    game.headers["Event"] = event
    game.headers["Date"] = date.strftime("%Y.%m.%d")
    game.headers["White"] = white
    game.headers["Black"] = black

    time_control = state.config.time_control
    if not time_control.is_unlimited:
        game.headers["TimeControl"] = (
            f"{time_control.initial_seconds:g}+{time_control.increment_seconds:g}"
        )

    node: chess.pgn.GameNode = game
    for record in state.move_history:
        node = node.add_variation(chess.Move.from_uci(record.uci))

    result = state.result if state.is_game_over else None
    game.headers["Result"] = result.score if result is not None else "*"
    if result is not None:
        termination = "time forfeit" if result.reason == EndReason.TIME_FORFEIT else "normal"
        game.headers["Termination"] = termination

    exporter = chess.pgn.StringExporter(headers=True, variations=False, comments=False)
    return game.accept(exporter)


def format_clock(seconds: float | None) -> str:
    """Clock text: ``m:ss`` from ten minutes up, ``m:ss.t`` below. Truncates."""
    if seconds is None or math.isinf(seconds):
        return "∞"
    s = max(0.0, seconds)
    mins = int(s) // 60
    secs = int(s) % 60
    tenths = int((s * 10) % 10)
    if mins >= 10:
        return f"{mins}:{secs:02d}"
    return f"{mins}:{secs:02d}.{tenths}"


def format_evaluation(sample: EvaluationSample | None) -> str:
    """Score text from White's point of view, e.g. ``+0.35`` or ``M3``."""
    if sample is None:
        return "0.00"
    if sample.mate is not None:
        prefix = "-" if sample.mate < 0 else ""
        return f"{prefix}M{abs(sample.mate)}"
    cp = sample.score_cp or 0
    if cp == 0:
        return "0.00"
    sign = "+" if cp > 0 else "-"
    return f"{sign}{abs(cp) / 100:.2f}"


def win_probability(sample: EvaluationSample | None) -> float:
    """White's expected score in [0, 1] for an evaluation bar."""
    if sample is None:
        return 0.5
    if sample.mate is not None:
        return 1.0 if sample.mate > 0 else 0.0
    cp = sample.score_cp or 0
    return 1.0 / (1.0 + math.exp(-_WIN_PROBABILITY_K * cp))
