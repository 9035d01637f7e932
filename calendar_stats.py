"""Calendar statistics over a window of daily goal statuses."""

from datetime import date, timedelta
from typing import Iterable

from schemas import CalendarDay, CalendarSummary, DailyGoalStatus, DayCompletion
from tracking import is_perfect_day

DEFAULT_WINDOW_DAYS = 30


def summarize(statuses: Iterable[DailyGoalStatus]) -> CalendarSummary:
    items = list(statuses)
    total_days = len(items)
    perfect_days = sum(1 for s in items if is_perfect_day(s))
    completion_rate = perfect_days * 100 // total_days if total_days > 0 else 0
    return CalendarSummary(
        perfect_days=perfect_days,
        total_days=total_days,
        completion_rate_percent=completion_rate,
        step_goals_met=sum(1 for s in items if s.steps_achieved),
        water_goals_met=sum(1 for s in items if s.water_achieved),
        sleep_goals_met=sum(1 for s in items if s.sleep_achieved),
    )


def classify_day(status: DailyGoalStatus) -> DayCompletion:
    met = sum((status.steps_achieved, status.water_achieved, status.sleep_achieved))
    if met == 3:
        return DayCompletion.ALL_GOALS
    if met == 0:
        return DayCompletion.NO_GOALS
    return DayCompletion.PARTIAL


def calendar_window(
    statuses: Iterable[DailyGoalStatus],
    end: date,
    days: int = DEFAULT_WINDOW_DAYS,
) -> list[CalendarDay]:
    """
    One entry per date from ``end - days`` through ``end`` inclusive, oldest
    first. Dates with no status are marked NO_DATA.
    """
    by_day = {s.day: s for s in statuses}
    window = []
    for offset in range(-days, 1):
        day = end + timedelta(days=offset)
        status = by_day.get(day)
        window.append(
            CalendarDay(
                day=day,
                status=status,
                completion=classify_day(status) if status else DayCompletion.NO_DATA,
            )
        )
    return window
