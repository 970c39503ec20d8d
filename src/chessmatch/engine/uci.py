"""UCI search backend built on ``chess.engine``.

Communication with the engine uses FEN strings (position) and UCI
strings (moves), keeping the coupling between the match layer and the
engine process to a minimum.
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Callable
from typing import Protocol

import chess
import chess.engine

from chessmatch.core.errors import EngineError
from chessmatch.engine.search import EvaluationSample, SearchBudget
from chessmatch.engine.settings import EngineSettings

CancelCheck = Callable[[], bool]
SampleCallback = Callable[[EvaluationSample], None]


def _never_cancelled() -> bool:
    return False


class SearchBackend(Protocol):
    """Blocking search used from the engine worker thread."""

    def search(
        self,
        fen: str,
        budget: SearchBudget,
        on_sample: SampleCallback | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> str | None: ...

    def stop(self) -> None: ...

    def close(self) -> None: ...


def sample_from_score(score: chess.engine.PovScore, depth: int = 0) -> EvaluationSample:
    """Convert an engine score to a White-relative sample."""
    white = score.white()
    if white.is_mate():
        return EvaluationSample(mate=white.mate(), depth=depth)
    return EvaluationSample(score_cp=white.score(), depth=depth)


def limit_from_budget(budget: SearchBudget) -> chess.engine.Limit:
    """Translate a budget to ``go movetime ... wtime ... btime ...``."""
    increment = budget.increment_ms / 1000.0
    return chess.engine.Limit(
        time=max(budget.time_ms, budget.min_time_ms) / 1000.0,
        depth=budget.depth,
        white_clock=_seconds(budget.white_clock_ms),
        black_clock=_seconds(budget.black_clock_ms),
        white_inc=increment if budget.white_clock_ms is not None else None,
        black_inc=increment if budget.black_clock_ms is not None else None,
    )


def _seconds(ms: int | None) -> float | None:
    return None if ms is None else ms / 1000.0


class UciSearchBackend:
    """Drives a UCI engine process (e.g. Stockfish) through python-chess.

    The process is started lazily on the first search and reused.
    :meth:`stop` may be called from any thread.
    """

    __slots__ = ("_settings", "_engine", "_analysis", "_skill_level", "_lock")

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self._settings = settings or EngineSettings()
        self._engine: chess.engine.SimpleEngine | None = None
        self._analysis: chess.engine.SimpleAnalysisResult | None = None
        self._skill_level: int | None = None
        self._lock = threading.Lock()

    def search(
        self,
        fen: str,
        budget: SearchBudget,
        on_sample: SampleCallback | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> str | None:
        cancelled = is_cancelled or _never_cancelled
        board = chess.Board(fen)
        if board.is_game_over():
            return None

        engine = self._ensure_engine()
        self._configure_skill(engine, budget.skill_level)

        with engine.analysis(board, limit_from_budget(budget)) as analysis:
            with self._lock:
                self._analysis = analysis
            try:
                for info in analysis:
                    if cancelled():
                        analysis.stop()
                        break
                    score = info.get("score")
                    if score is not None and on_sample is not None:
                        on_sample(sample_from_score(score, info.get("depth", 0)))
                best = analysis.wait()
            finally:
                with self._lock:
                    self._analysis = None

        return best.move.uci() if best.move is not None else None

    def stop(self) -> None:
        """Ask a running search to return its best move now."""
        with self._lock:
            analysis = self._analysis
        if analysis is not None:
            with contextlib.suppress(chess.engine.EngineTerminatedError):
                analysis.stop()

    def close(self) -> None:
        engine = self._engine
        self._engine = None
        self._skill_level = None
        if engine is not None:
            with contextlib.suppress(chess.engine.EngineError, TimeoutError):
                engine.quit()

    # ── Internal ─────────────────────────────────────────────────────────

    def _ensure_engine(self) -> chess.engine.SimpleEngine:
        if self._engine is not None:
            return self._engine

        path = self._settings.engine_path
        try:
            engine = chess.engine.SimpleEngine.popen_uci(path)
        except (OSError, chess.engine.EngineError) as exc:
            raise EngineError(f"Cannot start UCI engine {path!r}: {exc}") from exc

        options = {
            "Threads": self._settings.threads,
            "Hash": self._settings.hash_mb,
        }
        engine.configure({k: v for k, v in options.items() if k in engine.options})
        self._engine = engine
        return engine

    def _configure_skill(self, engine: chess.engine.SimpleEngine, level: int) -> None:
        if level == self._skill_level or "Skill Level" not in engine.options:
            return
        engine.configure({"Skill Level": level})
        self._skill_level = level
