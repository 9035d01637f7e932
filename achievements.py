"""
Achievement evaluation

Decides which achievements unlock given the daily goal history:
- steps / water / sleep: a count (or consecutive run) of days meeting that goal
- consistency: a run of consecutive perfect days
- meditation: an externally counted number of completed sessions

Unlocking is one-way. An achievement that is already completed is returned
unchanged and never re-evaluated.
"""

import logging
from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Sequence

from errors import ValidationError
from schemas import Achievement, AchievementCategory, DailyGoalStatus
from tracking import is_perfect_day

logger = logging.getLogger(__name__)

DayPredicate = Callable[[DailyGoalStatus], bool]

_DAY_PREDICATES: dict[AchievementCategory, DayPredicate] = {
    AchievementCategory.STEPS: lambda s: s.steps_achieved,
    AchievementCategory.WATER: lambda s: s.water_achieved,
    AchievementCategory.SLEEP: lambda s: s.sleep_achieved,
    AchievementCategory.CONSISTENCY: is_perfect_day,
}


def default_catalog() -> list[Achievement]:
    """Achievements seeded on first run."""
    return [
        Achievement(
            id="step_master",
            title="Step Master",
            description="Walk 10,000 steps in a day",
            category=AchievementCategory.STEPS,
            target_value=1,
        ),
        Achievement(
            id="hydration_hero",
            title="Hydration Hero",
            description="Drink 2L of water daily for 7 days",
            category=AchievementCategory.WATER,
            target_value=7,
        ),
        Achievement(
            id="sleep_champion",
            title="Sleep Champion",
            description="Get 8 hours of sleep for 5 consecutive nights",
            category=AchievementCategory.SLEEP,
            target_value=5,
            consecutive=True,
        ),
        Achievement(
            id="meditation_master",
            title="Meditation Master",
            description="Complete 30 meditation sessions",
            category=AchievementCategory.MEDITATION,
            target_value=30,
        ),
        Achievement(
            id="consistency_king",
            title="Consistency King",
            description="Meet all daily goals for 7 days straight",
            category=AchievementCategory.CONSISTENCY,
            target_value=7,
        ),
        Achievement(
            id="perfect_week",
            title="Perfect Week",
            description="Complete all goals for an entire week",
            category=AchievementCategory.CONSISTENCY,
            target_value=7,
        ),
    ]


def _first_count_reached(
    history: Sequence[DailyGoalStatus], predicate: DayPredicate, target: int
) -> Optional[date]:
    count = 0
    for status in history:
        if predicate(status):
            count += 1
            if count >= target:
                return status.day
    return None


def _first_run_reached(
    history: Sequence[DailyGoalStatus], predicate: DayPredicate, target: int
) -> Optional[date]:
    run = 0
    previous: Optional[date] = None
    for status in history:
        if not predicate(status):
            run = 0
        elif run and previous is not None and status.day - previous == timedelta(days=1):
            run += 1
        else:
            # A gap in the dates breaks the run
            run = 1
        previous = status.day
        if run >= target:
            return status.day
    return None


def current_streak(history: Iterable[DailyGoalStatus], as_of: Optional[date] = None) -> int:
    """
    Consecutive perfect days ending at the most recent day of ``history``.

    With ``as_of`` the streak must reach ``as_of`` or the day before it; a day
    that is not perfect yet on ``as_of`` itself does not break it.
    """
    ordered = sorted(history, key=lambda s: s.day)
    expected: Optional[date] = None
    if as_of is not None:
        ordered = [s for s in ordered if s.day <= as_of]
        if ordered and ordered[-1].day == as_of and not is_perfect_day(ordered[-1]):
            ordered.pop()
        expected = as_of if ordered and ordered[-1].day == as_of else as_of - timedelta(days=1)
    streak = 0
    for status in reversed(ordered):
        if not is_perfect_day(status):
            break
        if expected is not None and status.day != expected:
            break
        streak += 1
        expected = status.day - timedelta(days=1)
    return streak


def _unlock(achievement: Achievement, on: date) -> Achievement:
    logger.info("Achievement unlocked: %s on %s", achievement.id, on.isoformat())
    return achievement.model_copy(update={"completed": True, "completed_date": on})


def evaluate(
    achievement: Achievement,
    daily_history: Iterable[DailyGoalStatus],
    *,
    meditation_sessions: int = 0,
    as_of: Optional[date] = None,
) -> Achievement:
    """
    Return ``achievement`` unlocked if its condition holds over ``daily_history``.

    ``completed_date`` is the day that satisfied the condition. Meditation
    achievements have no such day, so they use ``as_of`` (falling back to the
    last day of the history).
    """
    if achievement.completed:
        return achievement

    history = sorted(daily_history, key=lambda s: s.day)

    if achievement.category == AchievementCategory.MEDITATION:
        if meditation_sessions < achievement.target_value:
            return achievement
        on = as_of or (history[-1].day if history else None)
        if on is None:
            raise ValidationError("as_of is required to unlock a meditation achievement without history")
        return _unlock(achievement, on)

    predicate = _DAY_PREDICATES[achievement.category]
    if achievement.category == AchievementCategory.CONSISTENCY or achievement.consecutive:
        unlocked_on = _first_run_reached(history, predicate, achievement.target_value)
    else:
        unlocked_on = _first_count_reached(history, predicate, achievement.target_value)

    if unlocked_on is None:
        return achievement
    return _unlock(achievement, unlocked_on)


def evaluate_all(
    catalog: Iterable[Achievement],
    daily_history: Iterable[DailyGoalStatus],
    *,
    meditation_sessions: int = 0,
    as_of: Optional[date] = None,
) -> tuple[list[Achievement], list[Achievement]]:
    """Evaluate a whole catalog; returns (updated catalog, newly unlocked)."""
    history = list(daily_history)
    updated: list[Achievement] = []
    unlocked: list[Achievement] = []
    for achievement in catalog:
        result = evaluate(
            achievement,
            history,
            meditation_sessions=meditation_sessions,
            as_of=as_of,
        )
        updated.append(result)
        if result.completed and not achievement.completed:
            unlocked.append(result)
    return updated, unlocked
