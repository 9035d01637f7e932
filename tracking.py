"""
Daily tracking aggregation.

Turns raw daily measurements into per-goal achievement flags. Statuses are
always recomputed from the measurement and the current goals so they never go
stale when the goals change.
"""

from datetime import date
from typing import Iterable, Optional

from goals import is_sleep_goal_met, is_step_goal_met, is_water_goal_met
from schemas import DailyGoalStatus, DailyMeasurement, UserGoals

TRACKED_GOALS = 3


def empty_measurement(day: date) -> DailyMeasurement:
    return DailyMeasurement(day=day)


def aggregate(measurement: DailyMeasurement, goals: UserGoals) -> DailyGoalStatus:
    return DailyGoalStatus(
        day=measurement.day,
        steps_achieved=is_step_goal_met(measurement, goals),
        water_achieved=is_water_goal_met(measurement, goals),
        sleep_achieved=is_sleep_goal_met(measurement, goals),
        mood_logged=measurement.mood_logged,
    )


def aggregate_history(
    measurements: Iterable[DailyMeasurement], goals: UserGoals
) -> list[DailyGoalStatus]:
    """Aggregate every measurement, oldest day first."""
    ordered = sorted(measurements, key=lambda m: m.day)
    return [aggregate(m, goals) for m in ordered]


def overall_completion_ratio(status: DailyGoalStatus) -> float:
    # Mood is informational and not part of the ratio
    met = sum((status.steps_achieved, status.water_achieved, status.sleep_achieved))
    return met / TRACKED_GOALS


def is_perfect_day(status: DailyGoalStatus) -> bool:
    return status.steps_achieved and status.water_achieved and status.sleep_achieved


def apply_tracking_update(
    measurement: DailyMeasurement,
    *,
    steps: Optional[int] = None,
    water_liters: Optional[float] = None,
    sleep_hours: Optional[float] = None,
    mood_score: Optional[float] = None,
    calories: Optional[float] = None,
    distance_meters: Optional[float] = None,
) -> DailyMeasurement:
    """
    Return a validated copy of ``measurement`` with the given values replaced.

    Logging a mood score also marks the mood as logged for the day.
    """
    data = measurement.model_dump()
    updates = {
        "steps": steps,
        "water_liters": water_liters,
        "sleep_hours": sleep_hours,
        "mood_score": mood_score,
        "calories": calories,
        "distance_meters": distance_meters,
    }
    data.update({k: v for k, v in updates.items() if v is not None})
    if mood_score is not None:
        data["mood_logged"] = True
    return DailyMeasurement(**data)
