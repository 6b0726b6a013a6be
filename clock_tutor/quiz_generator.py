from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from enum import StrEnum

from .time_model import Period, Time

logger = logging.getLogger(__name__)


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


_VALID_MINUTES: dict[Difficulty, tuple[int, ...]] = {
    Difficulty.EASY: (0,),
    Difficulty.MEDIUM: (0, 15, 30, 45),
    Difficulty.HARD: tuple(range(60)),
}


def coerce_difficulty(value: object, fallback: Difficulty = Difficulty.MEDIUM) -> Difficulty:
    try:
        return Difficulty(str(value).strip().lower())
    except ValueError:
        return fallback


def valid_minutes(difficulty: Difficulty) -> tuple[int, ...]:
    """Minute values a quiz time may take at ``difficulty``."""
    return _VALID_MINUTES[difficulty]


def combination_count(difficulty: Difficulty) -> int:
    """Number of distinct (hour, minute) pairs available at ``difficulty``."""
    return 12 * len(_VALID_MINUTES[difficulty])


def generate_quiz_time(difficulty: Difficulty, rng: random.Random | None = None) -> Time:
    r = rng if rng is not None else random
    hours = r.randint(1, 12)
    period = Period.AM if r.random() < 0.5 else Period.PM
    minutes = r.choice(_VALID_MINUTES[difficulty])
    return Time(hours, minutes, period)


def generate_multiple_quiz_times(
    difficulty: Difficulty,
    count: int,
    rng: random.Random | None = None,
    *,
    exclude: Iterable[tuple[int, int]] = (),
) -> list[Time]:
    """Generate ``count`` times with distinct (hour, minute) pairs.

    AM/PM is ignored for uniqueness. Pairs listed in ``exclude`` are treated as
    already taken. Asking for more pairs than the tier can supply raises
    ``ValueError`` up front instead of sampling forever.
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    seen: set[tuple[int, int]] = set(exclude)
    available = combination_count(difficulty) - sum(
        1 for h, m in seen if 1 <= h <= 12 and m in _VALID_MINUTES[difficulty]
    )
    if count > available:
        raise ValueError(
            f"cannot draw {count} unique times at {difficulty.value} difficulty; "
            f"only {available} hour:minute combinations are available"
        )

    times: list[Time] = []
    while len(times) < count:
        time = generate_quiz_time(difficulty, rng)
        key = (time.hours, time.minutes)
        if key in seen:
            continue
        seen.add(key)
        times.append(time)

    logger.debug("generated %d %s quiz times", len(times), difficulty.value)
    return times
