"""Tests for Clock."""

from chessmatch.core.enums import Side
from chessmatch.game.clock import Clock
from chessmatch.game.interfaces import TimeControl


class TestClockBasics:
    def test_initial_remaining(self) -> None:
        clock = Clock(TimeControl(300, 0))
        assert clock.remaining(Side.WHITE) == 300.0
        assert clock.remaining(Side.BLACK) == 300.0

    def test_not_running_initially(self) -> None:
        clock = Clock(TimeControl(300, 0))
        assert not clock.is_running

    def test_start_sets_running(self) -> None:
        clock = Clock(TimeControl(300, 0))
        clock.start(Side.WHITE)
        assert clock.is_running
        assert clock.active_side == Side.WHITE

    def test_tick_charges_exact_elapsed(self) -> None:
        clock = Clock(TimeControl(300, 0))
        clock.start(Side.WHITE)
        clock.tick(1.25)
        clock.tick(0.5)
        assert clock.remaining(Side.WHITE) == 298.25
        assert clock.remaining(Side.BLACK) == 300.0  # opponent not ticking

    def test_tick_ignored_when_stopped(self) -> None:
        clock = Clock(TimeControl(300, 0))
        clock.start(Side.WHITE)
        clock.stop()
        clock.tick(10)
        assert clock.remaining(Side.WHITE) == 300.0

    def test_tick_ignores_non_positive_elapsed(self) -> None:
        clock = Clock(TimeControl(300, 0))
        clock.start(Side.WHITE)
        clock.tick(0)
        clock.tick(-3)
        assert clock.remaining(Side.WHITE) == 300.0

    def test_set_active(self) -> None:
        clock = Clock(TimeControl(300, 0))
        clock.start(Side.WHITE)
        clock.tick(2)
        clock.set_active(Side.BLACK)
        clock.tick(3)
        assert clock.remaining(Side.WHITE) == 298.0
        assert clock.remaining(Side.BLACK) == 297.0


class TestClockIncrement:
    def test_fischer_increment(self) -> None:
        clock = Clock(TimeControl(300, 5))
        clock.start(Side.WHITE)
        clock.tick(4)
        clock.apply_increment(Side.WHITE)
        assert clock.remaining(Side.WHITE) == 301.0

    def test_increment_adds_up(self) -> None:
        clock = Clock(TimeControl(10, 2))
        clock.apply_increment(Side.WHITE)
        clock.apply_increment(Side.WHITE)
        assert clock.remaining(Side.WHITE) == 14.0

    def test_no_increment_after_flag(self) -> None:
        clock = Clock(TimeControl(1, 2))
        clock.start(Side.WHITE)
        clock.tick(5)
        clock.apply_increment(Side.WHITE)
        assert clock.remaining(Side.WHITE) == 0.0


class TestClockFlagFall:
    def test_no_flag_initially(self) -> None:
        clock = Clock(TimeControl(300, 0))
        assert clock.flagged_side is None

    def test_flag_falls_at_zero(self) -> None:
        flagged: list[Side] = []
        clock = Clock(TimeControl(1, 0), on_zero=flagged.append)
        clock.start(Side.WHITE)
        clock.tick(1.5)
        assert clock.remaining(Side.WHITE) == 0.0
        assert clock.flagged_side == Side.WHITE
        assert not clock.is_running
        assert flagged == [Side.WHITE]

    def test_zero_is_idempotent(self) -> None:
        flagged: list[Side] = []
        clock = Clock(TimeControl(1, 0), on_zero=flagged.append)
        clock.start(Side.BLACK)
        for _ in range(5):
            clock.tick(1.0)
        assert clock.remaining(Side.BLACK) == 0.0
        assert flagged == [Side.BLACK]

    def test_cannot_restart_after_flag(self) -> None:
        clock = Clock(TimeControl(1, 0))
        clock.start(Side.WHITE)
        clock.tick(2)
        clock.start(Side.BLACK)
        clock.tick(1)
        assert not clock.is_running
        assert clock.remaining(Side.BLACK) == 1.0


class TestClockUnlimited:
    def test_unlimited_is_infinite(self) -> None:
        clock = Clock(TimeControl.unlimited())
        assert clock.is_unlimited
        assert clock.remaining(Side.WHITE) == float("inf")

    def test_unlimited_never_flags(self) -> None:
        clock = Clock(TimeControl.unlimited())
        clock.start(Side.WHITE)
        clock.tick(1e9)
        assert clock.flagged_side is None
        assert clock.remaining(Side.WHITE) == float("inf")


class TestClockSnapshot:
    def test_snapshot_reflects_state(self) -> None:
        clock = Clock(TimeControl(60, 0))
        clock.start(Side.BLACK)
        clock.tick(10)
        snap = clock.snapshot()
        assert snap.remaining(Side.BLACK) == 50.0
        assert snap.remaining(Side.WHITE) == 60.0
        assert snap.active_side == Side.BLACK
        assert snap.is_running
        assert snap.flagged_side is None


class TestTimeControl:
    def test_repr(self) -> None:
        assert repr(TimeControl(180, 2)) == "TimeControl(3m+2s)"
        assert repr(TimeControl.rapid_10m()) == "TimeControl(10m)"
        assert repr(TimeControl.unlimited()) == "TimeControl(unlimited)"

    def test_equality(self) -> None:
        assert TimeControl(300, 3) == TimeControl.blitz_5m3s()
        assert TimeControl(300, 0) != TimeControl(300, 3)
