"""Goal frequency model definitions (closed set of recurrence rules)."""
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


class FrequencyKind(str, Enum):
    """Recurrence rule kinds, as stored in the frequency_type column."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class DailyFrequency(BaseModel):
    """Scheduled every day."""

    kind: Literal["daily"] = "daily"


class WeeklyFrequency(BaseModel):
    """Scheduled on the listed weekdays (0=Sunday ... 6=Saturday); no days means never due."""

    kind: Literal["weekly"] = "weekly"
    days: list[Annotated[int, Field(ge=0, le=6)]]

    @field_validator("days")
    @classmethod
    def normalize_days(cls, value: list[int]) -> list[int]:
        return sorted(set(value))


class MonthlyFrequency(BaseModel):
    """Scheduled on one day of each month (months too short for it are skipped)."""

    kind: Literal["monthly"] = "monthly"
    day_of_month: int = Field(ge=1, le=31)


class CustomFrequency(BaseModel):
    """Scheduled every ``interval_days`` days counting from the goal's creation date."""

    kind: Literal["custom"] = "custom"
    interval_days: int = Field(ge=1)


Frequency = Annotated[
    Union[DailyFrequency, WeeklyFrequency, MonthlyFrequency, CustomFrequency],
    Field(discriminator="kind"),
]
