"""Engine search session: the Qt implementation of ``MoveProposer``."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal

from chessmatch.engine.qt_bridge import EngineWorker
from chessmatch.engine.search import (
    EvaluationSample,
    ProposalToken,
    ProposerListener,
    SearchBudget,
)
from chessmatch.engine.settings import EngineSettings
from chessmatch.engine.uci import SearchBackend

_LOGGER = logging.getLogger(__name__)


class EngineRequestSignal(Protocol):
    """Minimal signal interface used by :class:`EngineSession`."""

    def connect(self, slot: Callable[..., object]) -> object: ...

    def emit(self, fen: str, budget: object, token: int) -> object: ...


class _EngineCommandBus(QObject):
    """Signal bridge for issuing worker commands with queued delivery."""

    request_move = pyqtSignal(str, object, int)
    close_requested = pyqtSignal()


class EngineSession:
    """Owns the worker-thread search lifecycle and hands results to a listener.

    Each request gets a fresh token. Only the newest token is live:
    results for any other token are dropped here, and the listener is
    expected to check tokens again on its side.
    """

    __slots__ = (
        "__weakref__",
        "_settings",
        "_listener",
        "_command_bus",
        "_engine_request",
        "_dispatch_timer",
        "_engine_thread",
        "_engine_worker",
        "_next_token",
        "_pending_token",
        "_pending_fen",
        "_pending_budget",
        "_is_shutting_down",
        "_is_started",
    )

    def __init__(
        self,
        *,
        settings: EngineSettings | None = None,
        backend: SearchBackend | None = None,
        engine_request: EngineRequestSignal | None = None,
        parent: QObject | None = None,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._listener: ProposerListener | None = None

        self._command_bus = _EngineCommandBus(parent)
        self._engine_request: EngineRequestSignal = (
            engine_request or self._command_bus.request_move
        )
        self._dispatch_timer = QTimer(parent)
        self._dispatch_timer.setSingleShot(True)
        self._dispatch_timer.timeout.connect(self._emit_pending_request)

        self._engine_thread = QThread(parent)
        self._engine_worker = EngineWorker(backend, settings=self._settings)
        self._next_token = 0
        self._pending_token: ProposalToken | None = None
        self._pending_fen: str | None = None
        self._pending_budget: SearchBudget | None = None
        self._is_shutting_down = False
        self._is_started = False

    # ── Lifecycle ────────────────────────────────────────────────────────

    def setup(self) -> None:
        """Start engine worker in a dedicated thread and connect callbacks."""
        if self._is_started:
            return
        self._is_shutting_down = False
        self._engine_worker.moveToThread(self._engine_thread)
        self._engine_request.connect(self._engine_worker.request_move)
        self._command_bus.close_requested.connect(self._engine_worker.close)
        self._engine_worker.best_move_ready.connect(self._on_engine_best_move)
        self._engine_worker.evaluation_ready.connect(self._on_engine_evaluation)
        self._engine_worker.search_cancelled.connect(self._on_engine_cancelled)
        self._engine_worker.search_no_move.connect(self._on_engine_no_move)
        self._engine_worker.search_error.connect(self._on_engine_error)
        self._engine_thread.start()
        self._is_started = True

    def shutdown(self) -> None:
        """Stop active search, release the engine and stop the worker thread."""
        if not self._is_started:
            return
        self._is_shutting_down = True
        if self._pending_token is not None:
            self.cancel(self._pending_token)
        self._dispatch_timer.stop()
        self._command_bus.close_requested.emit()
        self._engine_thread.quit()
        self._engine_thread.wait(2000)
        self._clear_pending_request()
        self._is_started = False

    # ── MoveProposer ─────────────────────────────────────────────────────

    def bind(self, listener: ProposerListener) -> None:
        self._listener = listener

    def request_move(self, fen: str, budget: SearchBudget) -> ProposalToken:
        """Queue a best-move search for *fen*; supersedes any earlier request."""
        if self._pending_token is not None:
            self.cancel(self._pending_token)

        self._next_token += 1
        token = ProposalToken(self._next_token)
        if self._is_shutting_down:
            _LOGGER.warning("Engine request %s ignored during shutdown", token)
            return token
        if not self._is_started:
            self.setup()

        self._pending_token = token
        self._pending_fen = fen
        self._pending_budget = budget
        self._dispatch_timer.start(self._settings.request_delay_ms)
        return token

    def cancel(self, token: ProposalToken) -> None:
        """Cancel *token* if it is the pending request."""
        if token != self._pending_token:
            return
        self._dispatch_timer.stop()
        self._clear_pending_request()
        if self._is_started:
            self._engine_worker.cancel(int(token))

    # ── Worker callbacks ─────────────────────────────────────────────────

    def _on_engine_best_move(self, token: int, uci: str) -> None:
        if not self._accepts(token):
            return
        self._clear_pending_request()
        if self._listener is not None:
            self._listener.on_proposal(ProposalToken(token), uci)

    def _on_engine_no_move(self, token: int) -> None:
        if not self._accepts(token):
            return
        self._clear_pending_request()
        if self._listener is not None:
            self._listener.on_proposal(ProposalToken(token), None)

    def _on_engine_evaluation(self, token: int, sample_obj: object) -> None:
        if not self._accepts(token) or not isinstance(sample_obj, EvaluationSample):
            return
        if self._listener is not None:
            self._listener.on_evaluation(ProposalToken(token), sample_obj)

    def _on_engine_error(self, token: int, message: str) -> None:
        if not self._accepts(token):
            return
        self._clear_pending_request()
        _LOGGER.warning("Engine search %s failed: %s", token, message)
        if self._listener is not None:
            self._listener.on_proposal_error(ProposalToken(token), message)

    def _on_engine_cancelled(self, token: int) -> None:
        _LOGGER.debug("Engine search %s cancelled", token)

    # ── Internal ─────────────────────────────────────────────────────────

    def _accepts(self, token: int) -> bool:
        if self._is_shutting_down:
            return False
        if token != self._pending_token:
            _LOGGER.debug("Dropped result for stale engine request %s", token)
            return False
        return True

    def _emit_pending_request(self) -> None:
        if self._is_shutting_down:
            return

        token = self._pending_token
        fen = self._pending_fen
        budget = self._pending_budget
        if token is None or fen is None or budget is None:
            return
        self._engine_request.emit(fen, budget, int(token))

    def _clear_pending_request(self) -> None:
        self._pending_token = None
        self._pending_fen = None
        self._pending_budget = None
