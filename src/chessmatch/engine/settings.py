"""Engine settings shared by the controller and the Qt engine session."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EngineSettings:
    """All user-configurable engine settings."""

    # Path or command name of a UCI engine binary.
    engine_path: str = "stockfish"
    # Depth cap passed with each search; None lets the time budget decide.
    depth: int | None = None
    threads: int = 1
    hash_mb: int = 64

    # Seconds past the time budget before a search counts as unresponsive.
    max_wait_grace_s: float = 10.0
    # Retries (with a halved budget) before the match faults.
    max_retries: int = 1
    # Delay before a queued request is sent to the worker thread.
    request_delay_ms: int = 50
