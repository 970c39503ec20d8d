"""MatchController: the central orchestrator of a chess match.

Coordinates: PositionOracle, MoveProposer, Clock.
Emits events via simple callbacks so the UI / tests can subscribe.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

import chess

from chessmatch.core.enums import EndReason, FaultKind, MatchMode, Side
from chessmatch.core.oracle import Position, PositionOracle
from chessmatch.engine.search import (
    EvaluationSample,
    MoveProposer,
    ProposalToken,
    SearchBudget,
)
from chessmatch.engine.settings import EngineSettings
from chessmatch.engine.strength import search_budget
from chessmatch.game.clock import Clock
from chessmatch.game.interfaces import GamePhase, MatchConfig
from chessmatch.game.state import MatchFault, MatchResult, MatchState, MoveRecord

_LOGGER = logging.getLogger(__name__)

# Tolerance for floating-point comparisons against the thinking floor.
_EPSILON = 1e-9

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, MatchState], None]
RejectedCallback = Callable[["chess.Move | str", str], None]  # move, reason
GameOverCallback = Callable[[MatchResult], None]
PhaseCallback = Callable[[GamePhase], None]
EvaluationCallback = Callable[[EvaluationSample], None]
FaultCallback = Callable[[MatchFault], None]


@dataclass
class MatchEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_rejected: list[RejectedCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_evaluation: list[EvaluationCallback] = field(default_factory=list)
    on_fault: list[FaultCallback] = field(default_factory=list)


@dataclass(slots=True)
class _PendingRequest:
    """The one outstanding proposer request."""

    token: ProposalToken
    side: Side
    budget: SearchBudget
    requested_at: float
    retries_left: int
    held_move: chess.Move | None = None


# ── Controller ───────────────────────────────────────────────────────────────


class MatchController:
    """Owns turn order, clocks, computer-move requests and the result.

    The controller is the only writer of match state. Every entry point
    is serialized: intents run under a lock, and proposer events and
    clock ticks are queued and applied one at a time, so a proposer that
    answers while a move is being committed waits its turn instead of
    interleaving. A human intent issued from inside an event callback is
    rejected.

    Args:
        oracle: Rules engine used for legality and terminal status.
        proposer: Asynchronous move search for the computer side.
        time_source: Monotonic seconds; replaced by a fake in tests.
        settings: Engine depth, max-wait grace and retry budget.
    """

    __slots__ = (
        "__weakref__",
        "_oracle",
        "_proposer",
        "_now",
        "_settings",
        "_config",
        "_phase",
        "_position",
        "_start_fen",
        "_previous_positions",
        "_history",
        "_clock",
        "_last_tick_at",
        "_turn_started_at",
        "_evaluation",
        "_result",
        "_fault",
        "_pending",
        "_lock",
        "_busy",
        "_queue",
        "events",
    )

    def __init__(
        self,
        oracle: PositionOracle,
        proposer: MoveProposer,
        *,
        time_source: Callable[[], float] = time.monotonic,
        settings: EngineSettings | None = None,
    ) -> None:
        self._oracle = oracle
        self._proposer = proposer
        self._now = time_source
        self._settings = settings or EngineSettings()

        self._config = MatchConfig()
        self._phase = GamePhase.NOT_STARTED
        self._position: Position = oracle.initial_position()
        self._start_fen = self._position.fen
        self._previous_positions: list[Position] = []
        self._history: list[MoveRecord] = []
        self._clock = Clock(self._config.time_control, on_zero=self._on_flag)
        now = self._now()
        self._last_tick_at = now
        self._turn_started_at = now
        self._evaluation: EvaluationSample | None = None
        self._result: MatchResult | None = None
        self._fault: MatchFault | None = None
        self._pending: _PendingRequest | None = None

        self._lock = threading.RLock()
        self._busy = False
        self._queue: deque[Callable[[], None]] = deque()
        self.events = MatchEvents()

        proposer.bind(self)

    # ── Read accessors ───────────────────────────────────────────────────

    @property
    def state(self) -> MatchState:
        with self._lock:
            return MatchState(
                config=self._config,
                phase=self._phase,
                fen=self._position.fen,
                start_fen=self._start_fen,
                active_side=self._oracle.side_to_move(self._position),
                white_remaining=self._clock.remaining(Side.WHITE),
                black_remaining=self._clock.remaining(Side.BLACK),
                thinking=self._pending is not None,
                evaluation=self._evaluation,
                result=self._result,
                fault=self._fault,
                move_history=tuple(self._history),
            )

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def config(self) -> MatchConfig:
        return self._config

    @property
    def position(self) -> Position:
        return self._position

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def pending_token(self) -> ProposalToken | None:
        pending = self._pending
        return pending.token if pending is not None else None

    def is_computer(self, side: Side) -> bool:
        return self._config.is_computer(side)

    def legal_moves(self) -> list[chess.Move]:
        """Legal moves for the side to move, empty unless a human may move."""
        if self._phase != GamePhase.AWAITING_MOVE:
            return []
        return self._oracle.legal_moves(self._position)

    # ── Intents ──────────────────────────────────────────────────────────

    def new_game(self, config: MatchConfig | None = None) -> bool:
        """Discard the current match and start a new one.

        An unreadable start FEN returns False and leaves the current match
        untouched.
        """
        return self._run_intent("new_game", lambda: self._start(config or self._config))

    def submit_move(self, move: chess.Move | str) -> bool:
        """Human move for the side to move. Returns True if applied."""
        return self._run_intent("submit_move", lambda: self._human_move(move))

    def forfeit(self, side: Side | None = None) -> bool:
        """Concede the match for *side*.

        Defaults to the human side against the computer, and to the side
        to move between two humans.
        """
        return self._run_intent("forfeit", lambda: self._forfeit(side))

    def undo_move(self) -> bool:
        """Take back the last ply. Returns True on success."""
        return self._run_intent("undo_move", self._undo)

    # ── Engine and clock events ──────────────────────────────────────────

    def tick(self) -> None:
        """Charge elapsed wall time to the side to move."""
        self._post(self._handle_tick)

    def on_proposal(self, token: ProposalToken, uci: str | None) -> None:
        self._post(lambda: self._handle_proposal(token, uci))

    def on_evaluation(self, token: ProposalToken, sample: EvaluationSample) -> None:
        self._post(lambda: self._handle_evaluation(token, sample))

    def on_proposal_error(self, token: ProposalToken, message: str) -> None:
        self._post(lambda: self._handle_proposal_error(token, message))

    # ── Serialization ────────────────────────────────────────────────────

    def _run_intent(self, name: str, action: Callable[[], bool]) -> bool:
        with self._lock:
            if self._busy:
                _LOGGER.warning("Rejected re-entrant %s during a commit", name)
                return False
            self._busy = True
            try:
                result = action()
            finally:
                self._busy = False
            self._drain()
            return result

    def _post(self, event: Callable[[], None]) -> None:
        with self._lock:
            self._queue.append(event)
            if not self._busy:
                self._drain()

    def _drain(self) -> None:
        while self._queue:
            event = self._queue.popleft()
            self._busy = True
            try:
                event()
            finally:
                self._busy = False

    # ── Intent handlers ──────────────────────────────────────────────────

    def _start(self, config: MatchConfig) -> bool:
        try:
            position = self._oracle.initial_position(config.start_fen)
        except ValueError as exc:
            _LOGGER.warning("Rejected new game from %r: %s", config.start_fen, exc)
            return False

        self._invalidate_request()
        self._config = config
        self._position = position
        self._start_fen = position.fen
        self._previous_positions = []
        self._history = []
        self._clock = Clock(config.time_control, on_zero=self._on_flag)
        self._evaluation = None
        self._result = None
        self._fault = None
        now = self._now()
        self._last_tick_at = now
        self._turn_started_at = now

        _LOGGER.info(
            "New match: %s, human plays %s, strength %d, %r",
            config.mode.name.lower(),
            config.human_side,
            config.strength,
            config.time_control,
        )

        status = self._oracle.terminal_status(self._position)
        if status.is_over:
            assert status.reason is not None
            self._finish(MatchResult(status.winner, status.reason))
            return True

        self._clock.start(self._oracle.side_to_move(self._position))
        self._prompt_active_side()
        return True

    def _human_move(self, move: chess.Move | str) -> bool:
        if self._phase != GamePhase.AWAITING_MOVE:
            return self._reject(move, f"no human move expected in phase {self._phase.name}")

        side = self._oracle.side_to_move(self._position)
        if self._config.is_computer(side):
            return self._reject(move, f"{side} is played by the computer")

        if isinstance(move, str):
            try:
                parsed = chess.Move.from_uci(move)
            except ValueError:
                return self._reject(move, "unparseable move")
        else:
            parsed = move

        if not self._oracle.is_legal(self._position, parsed):
            return self._reject(move, "illegal move")

        now = self._now()
        self._settle_clock(now)
        if self._phase != GamePhase.AWAITING_MOVE:
            return False  # flag fell before the move landed

        self._commit(parsed, side, now, by_computer=False)
        return True

    def _forfeit(self, side: Side | None) -> bool:
        if not self._phase.is_live:
            return False
        self._settle_clock(self._now())
        if not self._phase.is_live:
            return False

        if side is None:
            if self._config.mode == MatchMode.HUMAN_VS_COMPUTER:
                side = self._config.human_side
            else:
                side = self._oracle.side_to_move(self._position)
        self._finish(MatchResult(side.opposite, EndReason.FORFEIT))
        return True

    def _undo(self) -> bool:
        if not self._history:
            return False
        if self._phase in (GamePhase.NOT_STARTED, GamePhase.FAULTED):
            return False
        if self._phase == GamePhase.GAME_OVER:
            result = self._result
            if not self._config.allow_undo_after_result:
                return False
            if result is not None and result.reason.is_forfeit:
                return False

        now = self._now()
        if self._phase.is_live:
            self._settle_clock(now)
            if not self._phase.is_live:
                return False

        self._invalidate_request()
        undone = self._history.pop()
        self._position = self._previous_positions.pop()
        self._result = None
        self._evaluation = None
        _LOGGER.debug("Undid %s (%s)", undone.san, undone.side)

        side = self._oracle.side_to_move(self._position)
        self._last_tick_at = now
        self._turn_started_at = now
        self._clock.set_active(side)
        self._clock.start(side)
        self._prompt_active_side()
        return True

    def _reject(self, move: chess.Move | str, reason: str) -> bool:
        _LOGGER.debug("Rejected move %s: %s", move, reason)
        for cb in self.events.on_rejected:
            cb(move, reason)
        return False

    # ── Event handlers ───────────────────────────────────────────────────

    def _handle_tick(self) -> None:
        if not self._phase.is_live:
            return
        now = self._now()
        self._settle_clock(now)
        pending = self._pending
        if pending is None or not self._phase.is_live:
            return

        if pending.held_move is not None:
            if self._floor_reached(pending, now):
                self._commit_proposal(pending, pending.held_move, now)
            return

        deadline = pending.budget.time_seconds + self._settings.max_wait_grace_s
        waited = now - pending.requested_at
        if waited > deadline:
            self._retry_or_fault(
                pending,
                FaultKind.ENGINE_UNRESPONSIVE,
                f"no move after {waited:.1f}s",
            )

    def _handle_proposal(self, token: ProposalToken, uci: str | None) -> None:
        pending = self._current_request(token)
        if pending is None:
            _LOGGER.debug("Dropped stale proposal %s for token %s", uci, token)
            return
        if pending.held_move is not None:
            _LOGGER.debug("Ignored duplicate proposal %s for token %s", uci, token)
            return

        if uci is None:
            self._handle_no_move(pending)
            return

        try:
            move = chess.Move.from_uci(uci)
        except ValueError:
            self._set_fault(
                FaultKind.ORACLE_CONTRADICTION,
                f"engine proposed unparseable move {uci!r}",
            )
            return
        if not self._oracle.is_legal(self._position, move):
            self._set_fault(
                FaultKind.ORACLE_CONTRADICTION,
                f"engine proposed illegal move {uci} in {self._position.fen}",
            )
            return

        now = self._now()
        if not self._floor_reached(pending, now):
            _LOGGER.debug(
                "Holding %s until the %.2fs thinking floor", uci, pending.budget.floor_seconds
            )
            pending.held_move = move
            return
        self._commit_proposal(pending, move, now)

    def _handle_no_move(self, pending: _PendingRequest) -> None:
        status = self._oracle.terminal_status(self._position)
        if not status.is_over:
            self._set_fault(
                FaultKind.ORACLE_CONTRADICTION,
                f"engine found no move in ongoing position {self._position.fen}",
            )
            return
        assert status.reason is not None
        self._pending = None
        self._finish(MatchResult(status.winner, status.reason))

    def _handle_evaluation(self, token: ProposalToken, sample: EvaluationSample) -> None:
        if self._current_request(token) is None:
            return
        self._evaluation = sample
        for cb in self.events.on_evaluation:
            cb(sample)

    def _handle_proposal_error(self, token: ProposalToken, message: str) -> None:
        pending = self._current_request(token)
        if pending is None:
            _LOGGER.debug("Dropped stale engine error for token %s: %s", token, message)
            return
        self._retry_or_fault(pending, FaultKind.ENGINE_FAILURE, message)

    def _on_flag(self, side: Side) -> None:
        """Clock callback: *side* ran out of time."""
        if not self._phase.is_live:
            return
        self._finish(MatchResult(side.opposite, EndReason.TIME_FORFEIT))

    # ── Internal helpers ─────────────────────────────────────────────────

    def _current_request(self, token: ProposalToken) -> _PendingRequest | None:
        pending = self._pending
        if pending is None or pending.token != token:
            return None
        if self._phase != GamePhase.THINKING:
            return None
        return pending

    def _floor_reached(self, pending: _PendingRequest, now: float) -> bool:
        return now - self._turn_started_at + _EPSILON >= pending.budget.floor_seconds

    def _settle_clock(self, now: float) -> None:
        elapsed = now - self._last_tick_at
        self._last_tick_at = now
        self._clock.tick(elapsed)

    def _commit_proposal(
        self, pending: _PendingRequest, move: chess.Move, now: float
    ) -> None:
        self._settle_clock(now)
        if self._phase != GamePhase.THINKING:
            return  # flag fell while the move was held
        self._pending = None
        self._commit(move, pending.side, now, by_computer=True)

    def _commit(self, move: chess.Move, side: Side, now: float, *, by_computer: bool) -> None:
        """Replace the position and hand the turn over; *move* must be legal."""
        san = self._oracle.san(self._position, move)
        new_position = self._oracle.apply(self._position, move)

        self._previous_positions.append(self._position)
        self._position = new_position
        self._clock.apply_increment(side)
        next_side = self._oracle.side_to_move(new_position)
        self._clock.set_active(next_side)

        record = MoveRecord(
            uci=move.uci(),
            san=san,
            side=side,
            fen_after=new_position.fen,
            by_computer=by_computer,
            think_seconds=now - self._turn_started_at,
        )
        self._history.append(record)
        self._turn_started_at = now
        _LOGGER.debug(
            "%s played %s in %.2fs%s",
            side,
            san,
            record.think_seconds,
            " (computer)" if by_computer else "",
        )

        status = self._oracle.terminal_status(new_position)
        if status.is_over:
            assert status.reason is not None
            result = MatchResult(status.winner, status.reason)
            self._finish(result, notify=False)
            self._emit_move(record)
            self._emit_game_over(result)
            return
        self._prompt_active_side()
        self._emit_move(record)

    def _prompt_active_side(self) -> None:
        """Ask whoever is to move for a move."""
        side = self._oracle.side_to_move(self._position)
        self._clock.set_active(side)
        if not self._clock.is_running:
            self._clock.start(side)

        if self._config.is_computer(side):
            self._request_move(side, None, self._settings.max_retries)
        else:
            self._set_phase(GamePhase.AWAITING_MOVE)

    def _request_move(
        self, side: Side, budget: SearchBudget | None, retries_left: int
    ) -> None:
        if budget is None:
            budget = search_budget(
                self._config.strength,
                side,
                self._clock.remaining_by_side(),
                self._clock.increment,
                depth=self._settings.depth,
            )
        requested_at = self._now()
        # A proposer answering synchronously is queued until this returns.
        token = self._proposer.request_move(self._position.fen, budget)
        self._pending = _PendingRequest(
            token=token,
            side=side,
            budget=budget,
            requested_at=requested_at,
            retries_left=retries_left,
        )
        _LOGGER.debug(
            "Requested move for %s (token %s, %d ms, floor %d ms)",
            side,
            token,
            budget.time_ms,
            budget.min_time_ms,
        )
        self._set_phase(GamePhase.THINKING)

    def _retry_or_fault(
        self, pending: _PendingRequest, kind: FaultKind, message: str
    ) -> None:
        self._proposer.cancel(pending.token)
        self._pending = None
        if pending.retries_left > 0:
            _LOGGER.warning("Engine request %s failed (%s); retrying", pending.token, message)
            self._request_move(pending.side, pending.budget.reduced(), pending.retries_left - 1)
            return
        self._set_fault(kind, message)

    def _invalidate_request(self) -> None:
        pending = self._pending
        if pending is None:
            return
        self._pending = None
        self._proposer.cancel(pending.token)
        _LOGGER.debug("Cancelled engine request %s", pending.token)

    def _finish(self, result: MatchResult, *, notify: bool = True) -> None:
        self._invalidate_request()
        self._clock.stop()
        self._result = result
        _LOGGER.info("Match over: %s", result)
        self._set_phase(GamePhase.GAME_OVER)
        if notify:
            self._emit_game_over(result)

    def _set_fault(self, kind: FaultKind, message: str) -> None:
        self._invalidate_request()
        self._clock.stop()
        fault = MatchFault(kind, message)
        self._fault = fault
        _LOGGER.error("Match faulted (%s): %s", kind.name, message)
        self._set_phase(GamePhase.FAULTED)
        for cb in self.events.on_fault:
            cb(fault)

    def _emit_move(self, record: MoveRecord) -> None:
        if not self.events.on_move:
            return
        state = self.state
        for cb in self.events.on_move:
            cb(record, state)

    def _emit_game_over(self, result: MatchResult) -> None:
        for cb in self.events.on_game_over:
            cb(result)

    def _set_phase(self, phase: GamePhase) -> None:
        self._phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)
