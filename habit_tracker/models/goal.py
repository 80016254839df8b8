"""Goal model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from habit_tracker.models.frequency import DailyFrequency, Frequency, WeeklyFrequency
from habit_tracker.models.habit_log import HabitLog


def _require_weekdays(frequency: Optional[Frequency]) -> Optional[Frequency]:
    if isinstance(frequency, WeeklyFrequency) and not frequency.days:
        raise ValueError("weekly frequency needs at least one day")
    return frequency


class GoalKind(str, Enum):
    """How a goal is logged."""

    CHECKBOX = "checkbox"
    NUMBER = "number"


class GoalBase(BaseModel):
    """Base goal fields."""

    title: str = Field(min_length=1)
    kind: GoalKind = GoalKind.CHECKBOX
    target_value: Optional[float] = None
    unit: Optional[str] = None
    frequency: Frequency = Field(default_factory=DailyFrequency)


class GoalCreate(GoalBase):
    """Goal creation model (colour picked from the palette when omitted)."""

    color: Optional[str] = None

    @field_validator("frequency")
    @classmethod
    def check_frequency(cls, value: Optional[Frequency]) -> Optional[Frequency]:
        return _require_weekdays(value)


class GoalUpdate(BaseModel):
    """Goal update model - all fields optional."""

    title: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None
    kind: Optional[GoalKind] = None
    target_value: Optional[float] = None
    unit: Optional[str] = None
    frequency: Optional[Frequency] = None

    @field_validator("frequency")
    @classmethod
    def check_frequency(cls, value: Optional[Frequency]) -> Optional[Frequency]:
        return _require_weekdays(value)


class Goal(GoalBase):
    """Full goal model with store fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    color: str
    created_at: datetime
    updated_at: datetime
    is_dirty: bool = True
    is_deleted: bool = False

    model_config = {"populate_by_name": True}


class GoalWithTodayStatus(Goal):
    """Goal decorated with its 30-day completion rate and the log for the day shown."""

    completion_rate: float = 0.0
    today_log: Optional[HabitLog] = None
