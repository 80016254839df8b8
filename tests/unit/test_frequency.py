"""Tests for the frequency engine."""
import pytest
from datetime import date, datetime, timedelta


class TestWeekdayIndex:
    """Tests for Sunday-based weekday numbers."""

    def test_sunday_is_zero(self):
        from habit_tracker.utils.frequency import weekday_index

        assert weekday_index(date(2025, 3, 2)) == 0

    def test_saturday_is_six(self):
        from habit_tracker.utils.frequency import weekday_index

        assert weekday_index(date(2025, 3, 8)) == 6


class TestIsScheduled:
    """Tests for is_scheduled."""

    def test_daily_always_scheduled(self, goal_factory):
        """Test daily goals are due every day."""
        from habit_tracker.utils.frequency import is_scheduled

        goal = goal_factory()

        assert is_scheduled(goal, date(2025, 3, 2))
        assert is_scheduled(goal, date(2025, 12, 31))

    def test_weekly_matches_listed_days(self, goal_factory):
        """Test weekly goals are due only on their weekdays."""
        from habit_tracker.models.frequency import WeeklyFrequency
        from habit_tracker.utils.frequency import is_scheduled

        goal = goal_factory(frequency=WeeklyFrequency(days=[1, 3]))

        assert is_scheduled(goal, date(2025, 3, 3))  # Monday
        assert not is_scheduled(goal, date(2025, 3, 4))  # Tuesday
        assert is_scheduled(goal, date(2025, 3, 5))  # Wednesday

    def test_weekly_sunday(self, goal_factory):
        """Test Sunday is day 0."""
        from habit_tracker.models.frequency import WeeklyFrequency
        from habit_tracker.utils.frequency import is_scheduled

        goal = goal_factory(frequency=WeeklyFrequency(days=[0]))

        assert is_scheduled(goal, date(2025, 3, 2))
        assert not is_scheduled(goal, date(2025, 3, 3))

    def test_monthly_matches_day_of_month(self, goal_factory):
        """Test monthly goals are due on their day of month."""
        from habit_tracker.models.frequency import MonthlyFrequency
        from habit_tracker.utils.frequency import is_scheduled

        goal = goal_factory(frequency=MonthlyFrequency(day_of_month=15))

        assert is_scheduled(goal, date(2025, 3, 15))
        assert not is_scheduled(goal, date(2025, 3, 16))

    def test_monthly_skips_short_months(self, goal_factory):
        """Test a day-31 goal is never due in February."""
        from habit_tracker.models.frequency import MonthlyFrequency
        from habit_tracker.utils.frequency import count_scheduled_in_range, is_scheduled

        goal = goal_factory(frequency=MonthlyFrequency(day_of_month=31))

        assert is_scheduled(goal, date(2025, 1, 31))
        assert count_scheduled_in_range(goal, date(2025, 2, 1), date(2025, 2, 28)) == 0

    def test_weekly_without_days_never_due(self, goal_factory):
        """Test a stored weekly rule with no days is due on no day."""
        from habit_tracker.utils.frequency import count_scheduled_in_range, parse_frequency

        goal = goal_factory(frequency=parse_frequency("weekly", '{"days": []}'))

        assert count_scheduled_in_range(goal, date(2025, 3, 2), date(2025, 3, 15)) == 0

    def test_custom_interval_counts_from_creation(self, goal_factory):
        """Test custom goals are due every N days from their creation date."""
        from habit_tracker.models.frequency import CustomFrequency
        from habit_tracker.utils.frequency import is_scheduled

        goal = goal_factory(
            frequency=CustomFrequency(interval_days=3),
            created_at=datetime(2025, 1, 1, 23, 30),
        )

        assert is_scheduled(goal, date(2025, 1, 1))
        assert not is_scheduled(goal, date(2025, 1, 3))
        assert is_scheduled(goal, date(2025, 1, 4))
        assert is_scheduled(goal, date(2025, 1, 7))

    def test_custom_never_before_creation(self, goal_factory):
        """Test custom goals are not due before they exist."""
        from habit_tracker.models.frequency import CustomFrequency
        from habit_tracker.utils.frequency import is_scheduled

        goal = goal_factory(frequency=CustomFrequency(interval_days=3))

        assert not is_scheduled(goal, date(2024, 12, 29))

    def test_accepts_iso_strings(self, goal_factory):
        """Test dates may be given as ISO strings."""
        from habit_tracker.models.frequency import WeeklyFrequency
        from habit_tracker.utils.frequency import is_scheduled

        goal = goal_factory(frequency=WeeklyFrequency(days=[1]))

        assert is_scheduled(goal, "2025-03-03")


class TestCountScheduledInRange:
    """Tests for count_scheduled_in_range."""

    def test_inclusive_range(self, goal_factory):
        """Test both ends of the range are counted."""
        from habit_tracker.utils.frequency import count_scheduled_in_range

        goal = goal_factory()

        assert count_scheduled_in_range(goal, date(2025, 3, 1), date(2025, 3, 7)) == 7

    def test_weekly_over_two_weeks(self, goal_factory):
        """Test weekly goals over a fortnight."""
        from habit_tracker.models.frequency import WeeklyFrequency
        from habit_tracker.utils.frequency import count_scheduled_in_range

        goal = goal_factory(frequency=WeeklyFrequency(days=[1, 3, 5]))

        assert count_scheduled_in_range(goal, date(2025, 3, 2), date(2025, 3, 15)) == 6

    @pytest.mark.parametrize("start_day", range(1, 8))
    def test_two_full_weeks_any_start(self, goal_factory, start_day):
        """Test two weekdays over 14 days always give 4, whatever the start weekday."""
        from habit_tracker.models.frequency import WeeklyFrequency
        from habit_tracker.utils.frequency import count_scheduled_in_range

        goal = goal_factory(frequency=WeeklyFrequency(days=[1, 3]))
        start = date(2025, 3, start_day)

        assert count_scheduled_in_range(goal, start, start + timedelta(days=13)) == 4

    def test_start_after_end(self, goal_factory):
        """Test an inverted range is empty."""
        from habit_tracker.utils.frequency import count_scheduled_in_range

        goal = goal_factory()

        assert count_scheduled_in_range(goal, date(2025, 3, 7), date(2025, 3, 1)) == 0


class TestFrequencyColumns:
    """Tests for frequency column serialization."""

    def test_serialize_uses_wire_keys(self):
        """Test payloads use the stored key names."""
        from habit_tracker.models.frequency import CustomFrequency, MonthlyFrequency
        from habit_tracker.utils.frequency import serialize_frequency

        assert serialize_frequency(MonthlyFrequency(day_of_month=5)) == (
            "monthly",
            '{"dayOfMonth": 5}',
        )
        assert serialize_frequency(CustomFrequency(interval_days=2)) == (
            "custom",
            '{"intervalDays": 2}',
        )

    def test_stored_columns_read_back_equal(self):
        """Test every non-daily rule survives the store columns unchanged."""
        from habit_tracker.models.frequency import (
            CustomFrequency,
            MonthlyFrequency,
            WeeklyFrequency,
        )
        from habit_tracker.utils.frequency import parse_frequency, serialize_frequency

        for frequency in (
            WeeklyFrequency(days=[1, 3, 5]),
            MonthlyFrequency(day_of_month=31),
            CustomFrequency(interval_days=10),
        ):
            assert parse_frequency(*serialize_frequency(frequency)) == frequency

    def test_parse_weekly(self):
        """Test a stored weekly payload is parsed."""
        from habit_tracker.models.frequency import WeeklyFrequency
        from habit_tracker.utils.frequency import parse_frequency

        assert parse_frequency("weekly", '{"days": [3, 1]}') == WeeklyFrequency(days=[1, 3])

    @pytest.mark.parametrize(
        "frequency_type, frequency_data",
        [
            (None, None),
            ("daily", None),
            ("yearly", '{"month": 1}'),
            ("weekly", None),
            ("weekly", "not json"),
            ("monthly", '{"day": 3}'),
            ("monthly", '{"dayOfMonth": 40}'),
            ("custom", "[1, 2]"),
        ],
    )
    def test_parse_falls_back_to_daily(self, frequency_type, frequency_data):
        """Test unknown or corrupt frequency columns read as daily."""
        from habit_tracker.models.frequency import DailyFrequency
        from habit_tracker.utils.frequency import parse_frequency

        assert parse_frequency(frequency_type, frequency_data) == DailyFrequency()
