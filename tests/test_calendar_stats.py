from __future__ import annotations

from datetime import date, timedelta

from calendar_stats import calendar_window, classify_day, summarize
from schemas import CalendarSummary, DailyGoalStatus, DayCompletion


def test_empty_window_is_all_zero() -> None:
    assert summarize([]) == CalendarSummary()


def test_summary_counts_and_floors_rate(make_history) -> None:
    statuses = make_history(date(2026, 1, 1), [True, False, False])
    statuses.append(DailyGoalStatus(day=date(2026, 1, 4), water_achieved=True))

    summary = summarize(statuses)

    assert summary.total_days == 4
    assert summary.perfect_days == 1
    assert summary.completion_rate_percent == 25
    assert summary.step_goals_met == 1
    assert summary.water_goals_met == 2
    assert summary.sleep_goals_met == 1


def test_rate_rounds_down(make_history) -> None:
    summary = summarize(make_history(date(2026, 1, 1), [True, True, False]))
    assert summary.completion_rate_percent == 66


def test_classify_day() -> None:
    day = date(2026, 1, 1)
    assert classify_day(DailyGoalStatus(day=day)) == DayCompletion.NO_GOALS
    assert classify_day(DailyGoalStatus(day=day, sleep_achieved=True)) == DayCompletion.PARTIAL
    full = DailyGoalStatus(day=day, steps_achieved=True, water_achieved=True, sleep_achieved=True)
    assert classify_day(full) == DayCompletion.ALL_GOALS


def test_calendar_window_fills_missing_days(make_history) -> None:
    end = date(2026, 1, 31)
    statuses = make_history(end - timedelta(days=1), [True, False])

    window = calendar_window(statuses, end)

    assert len(window) == 31
    assert window[0].day == date(2026, 1, 1)
    assert window[-1].day == end
    assert window[0].completion == DayCompletion.NO_DATA
    assert window[0].status is None
    assert window[-2].completion == DayCompletion.ALL_GOALS
    assert window[-1].completion == DayCompletion.NO_GOALS
