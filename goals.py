"""Goal-completion predicates over a day's measurement and the user's goals."""

from typing import Optional

from schemas import DailyMeasurement, UserGoals


def default_goals() -> UserGoals:
    """Goals a fresh installation starts with: 10000 steps, 2.0 L water, 8.0 h sleep."""
    return UserGoals()


def is_step_goal_met(measurement: DailyMeasurement, goals: UserGoals) -> bool:
    return measurement.steps >= goals.step_goal


def is_water_goal_met(measurement: DailyMeasurement, goals: UserGoals) -> bool:
    return measurement.water_liters >= goals.water_goal_liters


def is_sleep_goal_met(measurement: DailyMeasurement, goals: UserGoals) -> bool:
    return measurement.sleep_hours >= goals.sleep_goal_hours


def goal_progress_percent(value: float, goal: float) -> float:
    """Progress towards a goal as a percentage, uncapped (12000 of 10000 steps is 120.0)."""
    return value / goal * 100


def update_goals(
    goals: UserGoals,
    step_goal: Optional[int] = None,
    water_goal_liters: Optional[float] = None,
    sleep_goal_hours: Optional[float] = None,
) -> UserGoals:
    """Return a validated copy of ``goals`` with the given targets replaced."""
    data = goals.model_dump()
    if step_goal is not None:
        data["step_goal"] = step_goal
    if water_goal_liters is not None:
        data["water_goal_liters"] = water_goal_liters
    if sleep_goal_hours is not None:
        data["sleep_goal_hours"] = sleep_goal_hours
    # Re-validate so non-positive targets are rejected
    return UserGoals(**data)
