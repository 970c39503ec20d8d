"""ClockTicker: drives ``MatchController.tick`` from a Qt timer."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QObject, QTimer


class ClockTicker:
    """Fires *on_tick* every *interval_ms* on the owning thread's event loop.

    The interval only sets how often the clock is looked at; the amount
    charged per tick is measured by the controller, so a late timer
    never slows the clock down.
    """

    __slots__ = ("_timer",)

    def __init__(
        self,
        on_tick: Callable[[], None],
        *,
        interval_ms: int = 100,
        parent: QObject | None = None,
    ) -> None:
        self._timer = QTimer(parent)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(on_tick)

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
