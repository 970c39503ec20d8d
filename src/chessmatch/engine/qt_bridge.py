"""Qt bridge to run engine search in a worker thread."""

from __future__ import annotations

import threading

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from chessmatch.engine.search import EvaluationSample, SearchBudget
from chessmatch.engine.settings import EngineSettings
from chessmatch.engine.uci import SearchBackend, UciSearchBackend


class EngineWorker(QObject):
    """Thread-affine worker that computes engine moves on demand."""

    best_move_ready = pyqtSignal(int, str)
    evaluation_ready = pyqtSignal(int, object)
    search_cancelled = pyqtSignal(int)
    search_no_move = pyqtSignal(int)
    search_error = pyqtSignal(int, str)

    __slots__ = ("_cancel_event", "_cancelled_through", "_backend")

    def __init__(
        self,
        backend: SearchBackend | None = None,
        *,
        settings: EngineSettings | None = None,
    ) -> None:
        super().__init__()
        self._backend: SearchBackend = backend or UciSearchBackend(settings)
        self._cancel_event = threading.Event()
        # Requests with a token at or below this were cancelled before they ran.
        self._cancelled_through = 0

    @pyqtSlot(str, object, int)
    def request_move(self, fen: str, budget_obj: object, token: int) -> None:
        """Search *fen* within *budget_obj* and emit the result for *token*."""
        if token <= self._cancelled_through:
            self.search_cancelled.emit(token)
            return
        if not isinstance(budget_obj, SearchBudget):
            self.search_error.emit(token, "Engine received invalid budget")
            return

        self._cancel_event.clear()

        def emit_sample(sample: EvaluationSample) -> None:
            if not self._cancel_event.is_set():
                self.evaluation_ready.emit(token, sample)

        try:
            uci = self._backend.search(
                fen,
                budget_obj,
                on_sample=emit_sample,
                is_cancelled=self._cancel_event.is_set,
            )
        except Exception as exc:
            self.search_error.emit(token, str(exc))
            return

        if self._cancel_event.is_set():
            self.search_cancelled.emit(token)
            return

        if uci is None:
            self.search_no_move.emit(token)
            return

        self.best_move_ready.emit(token, uci)

    def cancel(self, token: int = 0) -> None:
        """Cancel the running search and anything queued up to *token* (thread-safe)."""
        self._cancelled_through = max(self._cancelled_through, token)
        self._cancel_event.set()
        self._backend.stop()

    @pyqtSlot()
    def close(self) -> None:
        """Release the engine process; runs on the worker thread."""
        self._backend.close()
