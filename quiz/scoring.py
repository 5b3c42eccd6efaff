"""Numeric rules for adaptive difficulty, scoring and streak decay.

Everything here is pure: callers pass counters in and get new values back.
"""
import math
from datetime import datetime, timedelta
from typing import Optional, Tuple

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10

STREAK_STEP = 0.1
MAX_STREAK_MULTIPLIER = 2.0
BASE_ACCURACY_MULTIPLIER = 0.5

DEFAULT_DECAY_WINDOW = timedelta(hours=24)


def clamp_difficulty(difficulty: int) -> int:
    return max(MIN_DIFFICULTY, min(difficulty, MAX_DIFFICULTY))


def adjust_difficulty(current_difficulty: int, correct: bool) -> int:
    """Move one step up after a correct answer, one step down otherwise."""
    step = 1 if correct else -1
    return clamp_difficulty(current_difficulty + step)


def accuracy(total_correct: int, total_answered: int) -> float:
    if total_answered <= 0:
        return 0.0
    return total_correct / total_answered


def score_delta(difficulty: int, streak: int, total_correct: int, total_answered: int) -> int:
    """
    Points earned by a correct answer.

    `streak`, `total_correct` and `total_answered` must already include the
    answer being scored, so a first correct answer is scored with streak 1
    and accuracy 1.0.
    """
    base = difficulty * 10
    streak_multiplier = min(1 + STREAK_STEP * streak, MAX_STREAK_MULTIPLIER)
    accuracy_multiplier = BASE_ACCURACY_MULTIPLIER + accuracy(total_correct, total_answered)
    return math.floor(base * streak_multiplier * accuracy_multiplier)


def decay_anchor(last_answered_at: Optional[datetime], streak_decayed_at: Optional[datetime]) -> Optional[datetime]:
    """Point from which inactivity is measured: the later of the last answer and the last decay."""
    stamps = [t for t in (last_answered_at, streak_decayed_at) if t is not None]
    return max(stamps) if stamps else None


def decay_streak(
    streak: int,
    anchor: Optional[datetime],
    now: datetime,
    window: timedelta = DEFAULT_DECAY_WINDOW,
) -> Tuple[int, Optional[datetime]]:
    """
    Streak after losing one point per full `window` since `anchor`.

    Also returns the anchor moved forward by the windows consumed, so the
    same windows are never charged twice. The partial window is kept.
    """
    if anchor is None:
        return streak, anchor
    periods = (now - anchor) // window
    if periods <= 0:
        return streak, anchor
    return max(0, streak - periods), anchor + periods * window


def decayed_streak(
    streak: int,
    last_answered_at: Optional[datetime],
    now: datetime,
    window: timedelta = DEFAULT_DECAY_WINDOW,
) -> int:
    """Streak after losing one point per full `window` of inactivity."""
    return decay_streak(streak, last_answered_at, now, window)[0]
