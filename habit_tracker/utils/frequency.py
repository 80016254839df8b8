"""Frequency engine: recurrence checks and frequency column (de)serialization."""
import json
from datetime import date, timedelta
from typing import Optional, assert_never

from pydantic import TypeAdapter, ValidationError

from habit_tracker.models.frequency import (
    CustomFrequency,
    DailyFrequency,
    Frequency,
    FrequencyKind,
    MonthlyFrequency,
    WeeklyFrequency,
)
from habit_tracker.utils.dates import DateLike, as_date


_frequency_adapter: TypeAdapter[Frequency] = TypeAdapter(Frequency)


def weekday_index(day: date) -> int:
    """
    Weekday number with Sunday as 0 and Saturday as 6.

    Examples:
        >>> weekday_index(date(2025, 3, 2))  # a Sunday
        0
        >>> weekday_index(date(2025, 3, 3))  # a Monday
        1
    """
    return (day.weekday() + 1) % 7


def is_scheduled(goal, on_date: DateLike) -> bool:
    """
    Determine whether a goal is due on a given calendar date.

    Args:
        goal: Any object with ``frequency`` and ``created_at`` attributes
        on_date: Calendar date (date, datetime or ISO string)

    Returns:
        True if the goal's recurrence rule selects the date
    """
    frequency = goal.frequency
    day = as_date(on_date)

    if isinstance(frequency, DailyFrequency):
        return True
    if isinstance(frequency, WeeklyFrequency):
        return weekday_index(day) in frequency.days
    if isinstance(frequency, MonthlyFrequency):
        return day.day == frequency.day_of_month
    if isinstance(frequency, CustomFrequency):
        diff_days = (day - as_date(goal.created_at)).days
        return diff_days >= 0 and diff_days % frequency.interval_days == 0
    assert_never(frequency)


def count_scheduled_in_range(goal, start: DateLike, end: DateLike) -> int:
    """
    Count the days in ``[start, end]`` (inclusive) on which the goal is due.

    Returns 0 when start is after end.
    """
    current = as_date(start)
    last = as_date(end)
    count = 0

    while current <= last:
        if is_scheduled(goal, current):
            count += 1
        current += timedelta(days=1)

    return count


def serialize_frequency(frequency: Frequency) -> tuple[str, Optional[str]]:
    """
    Serialize a frequency into its ``(frequency_type, frequency_data)`` columns.

    Examples:
        >>> serialize_frequency(WeeklyFrequency(days=[1, 3]))
        ('weekly', '{"days": [1, 3]}')
        >>> serialize_frequency(DailyFrequency())
        ('daily', None)
    """
    if isinstance(frequency, DailyFrequency):
        return FrequencyKind.DAILY.value, None
    if isinstance(frequency, WeeklyFrequency):
        return FrequencyKind.WEEKLY.value, json.dumps({"days": frequency.days})
    if isinstance(frequency, MonthlyFrequency):
        return FrequencyKind.MONTHLY.value, json.dumps({"dayOfMonth": frequency.day_of_month})
    if isinstance(frequency, CustomFrequency):
        return FrequencyKind.CUSTOM.value, json.dumps({"intervalDays": frequency.interval_days})
    assert_never(frequency)


def parse_frequency(
    frequency_type: Optional[str],
    frequency_data: Optional[str],
) -> Frequency:
    """
    Parse the frequency columns back into a frequency value.

    Unknown kinds, missing payloads and malformed payloads all fall back to
    daily so that a corrupt row never makes a goal unreadable.
    """
    kind = frequency_type or FrequencyKind.DAILY.value
    payload_keys = {
        FrequencyKind.WEEKLY.value: ("days", "days"),
        FrequencyKind.MONTHLY.value: ("dayOfMonth", "day_of_month"),
        FrequencyKind.CUSTOM.value: ("intervalDays", "interval_days"),
    }

    if kind not in payload_keys or not frequency_data:
        return DailyFrequency()

    wire_key, field_name = payload_keys[kind]
    try:
        payload = json.loads(frequency_data)
        return _frequency_adapter.validate_python(
            {"kind": kind, field_name: payload[wire_key]}
        )
    except (ValueError, TypeError, KeyError, ValidationError):
        return DailyFrequency()
