"""Wires oracle, engine session, controller and ticker for a Qt application."""

from __future__ import annotations

from PyQt6.QtCore import QObject

from chessmatch.core.oracle import ChessOracle
from chessmatch.engine.session import EngineSession
from chessmatch.engine.settings import EngineSettings
from chessmatch.engine.uci import SearchBackend
from chessmatch.game.controller import MatchController
from chessmatch.game.interfaces import MatchConfig
from chessmatch.game.ticker import ClockTicker


class MatchRuntime:
    """Everything a front end needs to run matches against a UCI engine.

    Must be created on the thread that runs the Qt event loop.
    """

    __slots__ = ("session", "controller", "ticker")

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        backend: SearchBackend | None = None,
        tick_interval_ms: int = 100,
        parent: QObject | None = None,
    ) -> None:
        settings = settings or EngineSettings()
        self.session = EngineSession(settings=settings, backend=backend, parent=parent)
        self.controller = MatchController(ChessOracle(), self.session, settings=settings)
        self.ticker = ClockTicker(
            self.controller.tick, interval_ms=tick_interval_ms, parent=parent
        )

    def start(self, config: MatchConfig | None = None) -> None:
        """Start a new match and the clock ticker."""
        self.session.setup()
        self.controller.new_game(config)
        self.ticker.start()

    def shutdown(self) -> None:
        self.ticker.stop()
        self.session.shutdown()
