"""Computer strength levels and their search budgets."""

from __future__ import annotations

import math
from dataclasses import dataclass

from chessmatch.core.enums import Side
from chessmatch.engine.search import SearchBudget

# Share of the mover's remaining time the thinking floor may take.
_FLOOR_CLOCK_SHARE = 0.1
# Expected number of moves left when pacing from the clock.
_MOVES_TO_GO = 40


@dataclass(slots=True, frozen=True)
class StrengthLevel:
    """One selectable computer strength.

    Weaker levels think longer so that play keeps a human pace.
    """

    level: int
    name: str
    skill_level: int
    elo: int
    thinking_floor_s: float
    move_time_s: float


STRENGTH_LEVELS: tuple[StrengthLevel, ...] = (
    StrengthLevel(1, "Beginner", 1, 400, 8.0, 10.0),
    StrengthLevel(2, "Easy", 3, 800, 6.0, 8.0),
    StrengthLevel(3, "Novice", 5, 1300, 4.5, 6.0),
    StrengthLevel(4, "Intermediate", 8, 1500, 3.0, 4.5),
    StrengthLevel(5, "Advanced", 12, 1800, 2.0, 3.5),
    StrengthLevel(6, "Expert", 16, 2100, 1.5, 2.5),
    StrengthLevel(7, "Master", 20, 2400, 1.0, 2.0),
)

MIN_STRENGTH = STRENGTH_LEVELS[0].level
MAX_STRENGTH = STRENGTH_LEVELS[-1].level


def strength_level(level: int) -> StrengthLevel:
    """Return the level entry, clamping out-of-range ordinals."""
    clamped = max(MIN_STRENGTH, min(MAX_STRENGTH, level))
    return STRENGTH_LEVELS[clamped - MIN_STRENGTH]


def thinking_floor(level: int, remaining_s: float) -> float:
    """Minimum seconds the computer deliberates, capped by its clock."""
    floor = strength_level(level).thinking_floor_s
    if math.isfinite(remaining_s):
        floor = min(floor, max(0.0, remaining_s) * _FLOOR_CLOCK_SHARE)
    return floor


def search_budget(
    level: int,
    side: Side,
    remaining: dict[Side, float],
    increment_s: float = 0.0,
    *,
    depth: int | None = None,
) -> SearchBudget:
    """Build the budget for *side* to move at strength *level*.

    *remaining* maps each side to its clock in seconds (``inf`` when
    untimed).
    """
    entry = strength_level(level)
    mover_left = remaining[side]
    floor_s = thinking_floor(level, mover_left)

    time_s = entry.move_time_s
    if math.isfinite(mover_left):
        time_s = min(time_s, mover_left / _MOVES_TO_GO + increment_s)
    time_s = max(time_s, floor_s)

    return SearchBudget(
        skill_level=entry.skill_level,
        time_ms=max(1, round(time_s * 1000)),
        min_time_ms=round(floor_s * 1000),
        depth=depth,
        white_clock_ms=_clock_ms(remaining[Side.WHITE]),
        black_clock_ms=_clock_ms(remaining[Side.BLACK]),
        increment_ms=round(increment_s * 1000),
    )


def _clock_ms(seconds: float) -> int | None:
    if not math.isfinite(seconds):
        return None
    return max(0, round(seconds * 1000))
