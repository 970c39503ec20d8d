"""Tests for Qt engine bridge worker."""

from __future__ import annotations

import chess
from PyQt6.QtTest import QSignalSpy

from chessmatch.engine.qt_bridge import EngineWorker
from chessmatch.engine.search import EvaluationSample, SearchBudget
from chessmatch.engine.uci import CancelCheck, SampleCallback


class _FakeBackend:
    def __init__(self, move: str | None = "e2e4") -> None:
        self.move = move
        self.samples: list[EvaluationSample] = []
        self.searched: list[tuple[str, SearchBudget]] = []
        self.stopped = 0
        self.closed = 0

    def search(
        self,
        fen: str,
        budget: SearchBudget,
        on_sample: SampleCallback | None = None,
        is_cancelled: CancelCheck | None = None,
    ) -> str | None:
        del is_cancelled
        self.searched.append((fen, budget))
        for sample in self.samples:
            if on_sample is not None:
                on_sample(sample)
        return self.move

    def stop(self) -> None:
        self.stopped += 1

    def close(self) -> None:
        self.closed += 1


class _CancellingBackend(_FakeBackend):
    def __init__(self) -> None:
        super().__init__()
        self.worker: EngineWorker | None = None

    def search(self, fen, budget, on_sample=None, is_cancelled=None):
        assert self.worker is not None
        self.worker.cancel()
        return super().search(fen, budget, on_sample, is_cancelled)


class _FailingBackend(_FakeBackend):
    def search(self, fen, budget, on_sample=None, is_cancelled=None):
        raise RuntimeError("engine crashed")


class TestEngineWorker:
    def test_emits_best_move(self) -> None:
        backend = _FakeBackend("g1f3")
        worker = EngineWorker(backend)
        best_moves = QSignalSpy(worker.best_move_ready)

        worker.request_move(chess.STARTING_FEN, SearchBudget(), 3)

        assert len(best_moves) == 1
        assert best_moves[0][0] == 3
        assert best_moves[0][1] == "g1f3"
        assert backend.searched[0][0] == chess.STARTING_FEN

    def test_emits_evaluations_with_token(self) -> None:
        backend = _FakeBackend()
        backend.samples = [EvaluationSample(score_cp=20, depth=1)]
        worker = EngineWorker(backend)
        evaluations = QSignalSpy(worker.evaluation_ready)

        worker.request_move(chess.STARTING_FEN, SearchBudget(), 5)

        assert len(evaluations) == 1
        assert evaluations[0][0] == 5
        assert evaluations[0][1] == EvaluationSample(score_cp=20, depth=1)

    def test_emits_cancelled_when_search_is_cancelled(self) -> None:
        backend = _CancellingBackend()
        worker = EngineWorker(backend)
        backend.worker = worker

        cancelled = QSignalSpy(worker.search_cancelled)
        best_moves = QSignalSpy(worker.best_move_ready)

        worker.request_move(chess.STARTING_FEN, SearchBudget(), 7)

        assert len(cancelled) == 1
        assert cancelled[0][0] == 7
        assert len(best_moves) == 0
        assert backend.stopped == 1

    def test_request_cancelled_before_it_runs_is_skipped(self) -> None:
        backend = _FakeBackend()
        worker = EngineWorker(backend)
        cancelled = QSignalSpy(worker.search_cancelled)

        worker.cancel(4)
        worker.request_move(chess.STARTING_FEN, SearchBudget(), 4)
        worker.request_move(chess.STARTING_FEN, SearchBudget(), 5)

        assert [cancelled[i][0] for i in range(len(cancelled))] == [4]
        assert len(backend.searched) == 1

    def test_emits_no_move_when_search_returns_none(self) -> None:
        worker = EngineWorker(_FakeBackend(None))

        no_move = QSignalSpy(worker.search_no_move)
        best_moves = QSignalSpy(worker.best_move_ready)
        errors = QSignalSpy(worker.search_error)

        worker.request_move(chess.STARTING_FEN, SearchBudget(), 11)

        assert len(no_move) == 1
        assert no_move[0][0] == 11
        assert len(best_moves) == 0
        assert len(errors) == 0

    def test_backend_exception_becomes_error_signal(self) -> None:
        worker = EngineWorker(_FailingBackend())
        errors = QSignalSpy(worker.search_error)

        worker.request_move(chess.STARTING_FEN, SearchBudget(), 2)

        assert len(errors) == 1
        assert errors[0][0] == 2
        assert "crashed" in errors[0][1]

    def test_invalid_budget_is_reported(self) -> None:
        backend = _FakeBackend()
        worker = EngineWorker(backend)
        errors = QSignalSpy(worker.search_error)

        worker.request_move(chess.STARTING_FEN, {"time_ms": 100}, 1)

        assert len(errors) == 1
        assert backend.searched == []

    def test_close_releases_backend(self) -> None:
        backend = _FakeBackend()
        worker = EngineWorker(backend)
        worker.close()
        assert backend.closed == 1
