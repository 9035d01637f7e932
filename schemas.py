"""
Domain Schemas for the Fitness Check App

Each stored Pydantic model maps to a collection named after the lowercase of
the class name (userprofile, dailytracking, challenge, achievement,
meditationsession). Models are frozen: operations return updated copies.
"""
import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from errors import ValidationError


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_finite(value) -> bool:
    return not isinstance(value, float) or math.isfinite(value)


# ---------- Profile & goals ----------

class UserGoals(FrozenModel):
    """Target values the daily measurements are compared against."""
    step_goal: int = Field(10000, description="Daily step target")
    water_goal_liters: float = Field(2.0, description="Daily water target in liters")
    sleep_goal_hours: float = Field(8.0, description="Nightly sleep target in hours")

    @field_validator("step_goal", "water_goal_liters", "sleep_goal_hours")
    @classmethod
    def _positive(cls, value, info):
        if not _is_finite(value) or not value > 0:
            raise ValidationError(f"{info.field_name} must be a finite number greater than 0")
        return value


class UserProfile(FrozenModel):
    """
    Collection: "userprofile"
    Single-row profile holding the user's name, avatar and goals
    """
    name: str = Field("Brenda", description="Display name")
    profile_picture_index: int = Field(0, description="Index into the avatar palette")
    goals: UserGoals = Field(default_factory=UserGoals)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValidationError("Name cannot be empty")
        return value


# ---------- Daily tracking ----------

class DailyMeasurement(FrozenModel):
    """
    Collection: "dailytracking"
    Raw facts recorded for one calendar day (one record per day)
    """
    day: date = Field(..., description="Calendar date, unique key")
    steps: int = Field(0, description="Steps walked")
    water_liters: float = Field(0.0, description="Water drunk in liters")
    sleep_hours: float = Field(0.0, description="Hours slept")
    mood_score: Optional[float] = Field(None, description="Mood on a 1-10 scale")
    mood_logged: bool = Field(False, description="Whether the mood was logged")
    calories: float = Field(0.0, description="Calories expended, from sync")
    distance_meters: float = Field(0.0, description="Distance walked, from sync")

    @field_validator("steps", "water_liters", "sleep_hours", "calories", "distance_meters")
    @classmethod
    def _non_negative(cls, value, info):
        if not _is_finite(value) or not value >= 0:
            raise ValidationError(f"{info.field_name} must be a finite, non-negative number")
        return value

    @field_validator("mood_score")
    @classmethod
    def _mood_range(cls, value):
        if value is not None and not 1 <= value <= 10:
            raise ValidationError("mood_score must be between 1 and 10")
        return value


class DailyGoalStatus(FrozenModel):
    """Per-goal achievement flags derived from a measurement and the goals. Never stored."""
    day: date
    steps_achieved: bool = False
    water_achieved: bool = False
    sleep_achieved: bool = False
    mood_logged: bool = False


# ---------- Challenges ----------

class ChallengeType(str, Enum):
    STEPS = "STEPS"
    WATER = "WATER"
    SLEEP = "SLEEP"
    MEDITATION = "MEDITATION"
    MIXED = "MIXED"


class ChallengeTypeDisplay(FrozenModel):
    emoji: str
    label: str


class ChallengeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class Challenge(FrozenModel):
    """
    Collection: "challenge"
    A shareable progress tracker with a numeric target and participants
    """
    id: str = Field(..., description="Opaque unique identifier")
    title: str
    description: str
    type: ChallengeType
    duration_label: str = Field(..., description="Free text such as '7 days'")
    participant_ids: frozenset[str] = Field(default_factory=frozenset)
    active: bool = True
    prize_text: Optional[str] = None
    progress: float = 0.0
    max_progress: float = 100.0
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _progress_bounds(self):
        if not math.isfinite(self.max_progress) or not self.max_progress > 0:
            raise ValidationError("max_progress must be a finite number greater than 0")
        if not (math.isfinite(self.progress) and 0 <= self.progress <= self.max_progress):
            raise ValidationError(
                f"progress must be within [0, {self.max_progress}], got {self.progress}"
            )
        return self


# ---------- Leaderboard ----------

class LeaderboardParticipant(FrozenModel):
    id: str
    display_name: str
    primary_score: int = Field(0, description="Current measurement value, e.g. today's steps")
    streak_length: int = Field(0, description="Consecutive days streak")


class LeaderboardEntry(FrozenModel):
    participant_id: str
    display_name: str
    score: int
    rank: int


# ---------- Achievements ----------

class AchievementCategory(str, Enum):
    STEPS = "steps"
    WATER = "water"
    SLEEP = "sleep"
    MEDITATION = "meditation"
    CONSISTENCY = "consistency"


class Achievement(FrozenModel):
    """
    Collection: "achievement"
    One-way unlockable badge; completed/completed_date only ever go false -> true
    """
    id: str
    title: str
    description: str
    category: AchievementCategory
    target_value: int = Field(..., description="Day count, streak length or session count")
    consecutive: bool = Field(False, description="Require a run of consecutive qualifying days")
    completed: bool = False
    completed_date: Optional[date] = None

    @model_validator(mode="after")
    def _completion_consistent(self):
        if self.target_value <= 0:
            raise ValidationError("target_value must be greater than 0")
        if self.completed != (self.completed_date is not None):
            raise ValidationError("completed_date must be set exactly when completed is true")
        return self


# ---------- Meditation ----------

class MeditationSession(FrozenModel):
    """
    Collection: "meditationsession"
    A started meditation session; completed ones feed meditation achievements
    """
    id: str
    duration_minutes: int
    started_at: datetime = Field(default_factory=_utcnow)
    completed: bool = False
    completed_at: Optional[datetime] = None

    @field_validator("duration_minutes")
    @classmethod
    def _positive_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValidationError("duration_minutes must be greater than 0")
        return value


# ---------- Synced fitness data ----------

class FitnessData(FrozenModel):
    """Steps, calories and distance pulled from the fitness API for one day."""
    day: date
    steps: int = 0
    calories: float = 0.0
    distance_meters: float = 0.0
    last_sync_time: datetime = Field(default_factory=_utcnow)

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000

    @property
    def distance_miles(self) -> float:
        return self.distance_meters * 0.000621371


# ---------- Calendar ----------

class DayCompletion(str, Enum):
    ALL_GOALS = "all_goals"
    PARTIAL = "partial"
    NO_GOALS = "no_goals"
    NO_DATA = "no_data"


class CalendarDay(FrozenModel):
    day: date
    status: Optional[DailyGoalStatus] = None
    completion: DayCompletion


class CalendarSummary(FrozenModel):
    perfect_days: int = 0
    total_days: int = 0
    completion_rate_percent: int = 0
    step_goals_met: int = 0
    water_goals_met: int = 0
    sleep_goals_met: int = 0
