"""Tests for the Qt clock ticker."""

import pytest
from PyQt6.QtCore import QCoreApplication, QElapsedTimer

from chessmatch.game.ticker import ClockTicker


@pytest.mark.usefixtures("qapp")
class TestClockTicker:
    def test_start_and_stop(self) -> None:
        ticker = ClockTicker(lambda: None, interval_ms=50)
        assert ticker.interval_ms == 50
        assert not ticker.is_active
        ticker.start()
        assert ticker.is_active
        ticker.stop()
        assert not ticker.is_active

    def test_fires_callback(self) -> None:
        ticks: list[int] = []
        ticker = ClockTicker(lambda: ticks.append(1), interval_ms=5)
        ticker.start()
        timer = QElapsedTimer()
        timer.start()
        while not ticks and timer.elapsed() < 2000:
            QCoreApplication.processEvents()
        ticker.stop()
        assert ticks
