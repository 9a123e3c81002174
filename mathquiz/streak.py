"""Streak and speed-multiplier bookkeeping.

A correct answer grows the streak by a bonus that depends on how quickly it
came in. Slow correct answers keep the learner on the board but reset the
streak to exactly 1; wrong answers and "I don't know" wipe it.
"""

import math
from typing import NamedTuple

from mathquiz.models import Outcome

SLOW_ANSWER_SECONDS = 20

# (upper bound in seconds, multiplier); first match wins, bounds inclusive.
SPEED_TIERS = ((5, 3.0), (10, 2.0), (15, 1.5))
BASE_MULTIPLIER = 1.0

# Reported for slow-but-correct answers: "no bonus, and the streak was reset".
SLOW_RESET_MULTIPLIER = 0.0


class StreakResult(NamedTuple):
    streak: int
    multiplier: float


def speed_multiplier(seconds: float) -> float:
    """Bonus multiplier for a correct answer given in under the slow threshold."""
    for limit, multiplier in SPEED_TIERS:
        if seconds <= limit:
            return multiplier
    return BASE_MULTIPLIER


def evaluate(outcome: Outcome, response_seconds: float, prior_streak: int) -> StreakResult:
    """Return the new streak and the multiplier that produced it."""
    response_seconds = max(0, response_seconds)
    prior_streak = max(0, prior_streak)

    if outcome is not Outcome.CORRECT:
        return StreakResult(streak=0, multiplier=BASE_MULTIPLIER)

    if response_seconds >= SLOW_ANSWER_SECONDS:
        return StreakResult(streak=1, multiplier=SLOW_RESET_MULTIPLIER)

    multiplier = speed_multiplier(response_seconds)
    increase = math.floor(1 * multiplier)
    return StreakResult(streak=prior_streak + increase, multiplier=multiplier)
