"""Habit log model definitions."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class HabitStatus(str, Enum):
    """Outcome of a goal on one calendar date."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class HabitLogCreate(BaseModel):
    """Habit log creation/replacement model."""

    status: HabitStatus
    value: Optional[float] = None


class HabitLog(BaseModel):
    """Full habit log model with store fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    goal_id: str
    date: date
    status: HabitStatus
    value: Optional[float] = None
    created_at: datetime
    updated_at: datetime
    is_dirty: bool = True
    is_deleted: bool = False

    model_config = {"populate_by_name": True}
