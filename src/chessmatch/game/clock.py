"""Chess clock with Fischer increment support.

The clock does not read wall time itself: whoever drives it measures the
elapsed time between ticks and passes it to :meth:`Clock.tick`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from chessmatch.core.enums import Side
from chessmatch.game.interfaces import IClock, TimeControl

ZeroCallback = Callable[[Side], None]


@dataclass(frozen=True, slots=True)
class ClockSnapshot:
    """Read-only view of the clock at one instant."""

    white_remaining: float
    black_remaining: float
    active_side: Side | None
    is_running: bool
    flagged_side: Side | None = None

    def remaining(self, side: Side) -> float:
        return self.white_remaining if side == Side.WHITE else self.black_remaining


class Clock(IClock):
    """Dual chess clock tracking remaining time for both players.

    Only the active side's time decreases, and only while running. When
    it reaches zero the clock stops, remembers the flagged side and calls
    *on_zero* once.
    """

    __slots__ = (
        "_time_control",
        "_remaining",
        "_active_side",
        "_running",
        "_flagged_side",
        "_on_zero",
    )

    def __init__(
        self,
        time_control: TimeControl,
        on_zero: ZeroCallback | None = None,
    ) -> None:
        self._time_control = time_control
        self._remaining: dict[Side, float] = {
            Side.WHITE: float(time_control.initial_seconds),
            Side.BLACK: float(time_control.initial_seconds),
        }
        self._active_side: Side | None = None
        self._running = False
        self._flagged_side: Side | None = None
        self._on_zero = on_zero

    # ── IClock implementation ────────────────────────────────────────────

    def start(self, side: Side) -> None:
        if self._flagged_side is not None:
            return
        self._active_side = side
        self._running = True

    def stop(self) -> None:
        self._running = False

    def tick(self, elapsed: float) -> None:
        if not self._running or self._active_side is None or elapsed <= 0:
            return
        side = self._active_side
        left = max(0.0, self._remaining[side] - elapsed)
        self._remaining[side] = left
        if left == 0.0:
            self._running = False
            self._flagged_side = side
            if self._on_zero is not None:
                self._on_zero(side)

    def set_active(self, side: Side) -> None:
        self._active_side = side

    def remaining(self, side: Side) -> float:
        return self._remaining[side]

    def apply_increment(self, side: Side) -> None:
        if self._flagged_side is not None:
            return
        self._remaining[side] += self._time_control.increment_seconds

    # ── Extra helpers ────────────────────────────────────────────────────

    @property
    def time_control(self) -> TimeControl:
        return self._time_control

    @property
    def increment(self) -> float:
        return self._time_control.increment_seconds

    @property
    def is_unlimited(self) -> bool:
        return self._time_control.is_unlimited

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def active_side(self) -> Side | None:
        return self._active_side

    @property
    def flagged_side(self) -> Side | None:
        return self._flagged_side

    def remaining_by_side(self) -> dict[Side, float]:
        return dict(self._remaining)

    def snapshot(self) -> ClockSnapshot:
        """Capture the current clock state."""
        return ClockSnapshot(
            white_remaining=self._remaining[Side.WHITE],
            black_remaining=self._remaining[Side.BLACK],
            active_side=self._active_side,
            is_running=self._running,
            flagged_side=self._flagged_side,
        )
