"""Tests for Pydantic models."""
import pytest
from datetime import date, datetime
from pydantic import ValidationError


class TestFrequencyModel:
    """Tests for frequency models."""

    def test_frequency_kind_enum_values(self):
        """Test FrequencyKind enum has correct values."""
        from habit_tracker.models.frequency import FrequencyKind

        assert FrequencyKind.DAILY.value == "daily"
        assert FrequencyKind.WEEKLY.value == "weekly"
        assert FrequencyKind.MONTHLY.value == "monthly"
        assert FrequencyKind.CUSTOM.value == "custom"

    def test_weekly_days_sorted_and_deduplicated(self):
        """Test weekly days are normalized."""
        from habit_tracker.models.frequency import WeeklyFrequency

        frequency = WeeklyFrequency(days=[5, 1, 5, 0])

        assert frequency.days == [0, 1, 5]

    def test_weekly_without_days_is_allowed(self):
        """Test a stored weekly frequency may list no days."""
        from habit_tracker.models.frequency import WeeklyFrequency

        assert WeeklyFrequency(days=[]).days == []

    def test_new_goal_needs_a_weekday(self):
        """Test creating or updating a goal with an empty weekly rule is rejected."""
        from habit_tracker.models.goal import GoalCreate, GoalUpdate

        with pytest.raises(ValidationError):
            GoalCreate(title="Run", frequency={"kind": "weekly", "days": []})
        with pytest.raises(ValidationError):
            GoalUpdate(frequency={"kind": "weekly", "days": []})

    def test_weekly_rejects_out_of_range_day(self):
        """Test weekday numbers must be 0-6."""
        from habit_tracker.models.frequency import WeeklyFrequency

        with pytest.raises(ValidationError):
            WeeklyFrequency(days=[7])

    def test_monthly_day_range(self):
        """Test day of month must be 1-31."""
        from habit_tracker.models.frequency import MonthlyFrequency

        assert MonthlyFrequency(day_of_month=31).day_of_month == 31
        with pytest.raises(ValidationError):
            MonthlyFrequency(day_of_month=0)
        with pytest.raises(ValidationError):
            MonthlyFrequency(day_of_month=32)

    def test_custom_interval_must_be_positive(self):
        """Test custom interval must be at least one day."""
        from habit_tracker.models.frequency import CustomFrequency

        with pytest.raises(ValidationError):
            CustomFrequency(interval_days=0)


class TestGoalModel:
    """Tests for Goal models."""

    def test_goal_create_defaults(self):
        """Test creating a goal with minimal fields."""
        from habit_tracker.models.frequency import DailyFrequency
        from habit_tracker.models.goal import GoalCreate, GoalKind

        goal = GoalCreate(title="Drink water")

        assert goal.kind == GoalKind.CHECKBOX
        assert goal.frequency == DailyFrequency()
        assert goal.color is None
        assert goal.target_value is None

    def test_goal_create_discriminates_frequency(self):
        """Test the frequency union is resolved by its kind."""
        from habit_tracker.models.frequency import MonthlyFrequency
        from habit_tracker.models.goal import GoalCreate

        goal = GoalCreate(
            title="Pay rent",
            frequency={"kind": "monthly", "day_of_month": 1},
        )

        assert isinstance(goal.frequency, MonthlyFrequency)
        assert goal.frequency.day_of_month == 1

    def test_goal_create_unknown_frequency_kind(self):
        """Test unknown frequency kinds are rejected at the API boundary."""
        from habit_tracker.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(title="Run", frequency={"kind": "yearly"})

    def test_goal_create_empty_title(self):
        """Test empty titles are rejected."""
        from habit_tracker.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(title="")

    def test_goal_serializes_id(self):
        """Test the store _id is exposed as id."""
        from habit_tracker.models.goal import Goal

        goal = Goal(
            _id="goal-1",
            user_id="user-1",
            title="Read",
            color="#6200ee",
            created_at=datetime(2025, 1, 1),
            updated_at=datetime(2025, 1, 1),
        )

        data = goal.model_dump(by_alias=True)
        assert data["id"] == "goal-1"
        assert data["frequency"] == {"kind": "daily"}


class TestHabitLogModel:
    """Tests for HabitLog models."""

    def test_habit_status_enum_values(self):
        """Test HabitStatus enum has correct values."""
        from habit_tracker.models.habit_log import HabitStatus

        assert HabitStatus.COMPLETED.value == "completed"
        assert HabitStatus.SKIPPED.value == "skipped"
        assert HabitStatus.FAILED.value == "failed"

    def test_habit_log_parses_iso_date(self):
        """Test the stored ISO date string becomes a date."""
        from habit_tracker.models.habit_log import HabitLog

        log = HabitLog(
            _id="log-1",
            goal_id="goal-1",
            date="2025-03-04",
            status="completed",
            created_at=datetime(2025, 3, 4),
            updated_at=datetime(2025, 3, 4),
        )

        assert log.date == date(2025, 3, 4)

    def test_habit_log_create_invalid_status(self):
        """Test unknown statuses are rejected."""
        from habit_tracker.models.habit_log import HabitLogCreate

        with pytest.raises(ValidationError):
            HabitLogCreate(status="done")


class TestUserModel:
    """Tests for User models."""

    def test_user_create_requires_pin(self):
        """Test profiles need a PIN."""
        from habit_tracker.models.user import UserCreate

        with pytest.raises(ValidationError):
            UserCreate(name="Alice")

    def test_user_has_no_pin_hash(self):
        """Test the response model never carries the PIN hash."""
        from habit_tracker.models.user import User

        assert "pin_hash" not in User.model_fields


class TestSyncModels:
    """Tests for sync models."""

    def test_sync_status_values(self):
        """Test SyncStatus enum has correct values."""
        from habit_tracker.models.sync import SyncStatus

        assert {status.value for status in SyncStatus} == {
            "idle",
            "syncing",
            "success",
            "error",
            "offline",
            "not_configured",
        }

    def test_remote_config_requires_values(self):
        """Test empty credentials are rejected."""
        from habit_tracker.models.sync import RemoteConfig

        with pytest.raises(ValidationError):
            RemoteConfig(url="", api_key="key")

    def test_app_state_change_values(self):
        """Test only known lifecycle states are accepted."""
        from habit_tracker.models.sync import AppStateChange

        assert AppStateChange(state="background").state == "background"
        with pytest.raises(ValidationError):
            AppStateChange(state="asleep")
