"""Analytics service - loads goals and logs and runs the analytics engine."""
from datetime import date
from typing import Optional

from habit_tracker.models.analytics import LeaderboardEntry, PersonalAnalytics, StreakInfo
from habit_tracker.models.goal import Goal, GoalWithTodayStatus
from habit_tracker.models.habit_log import HabitLog
from habit_tracker.services.goal_service import GoalService
from habit_tracker.services.habit_log_service import HabitLogService
from habit_tracker.services.user_service import UserService
from habit_tracker.utils import analytics
from habit_tracker.utils.frequency import is_scheduled


class AnalyticsService:
    """Service for computing analytics over the local store."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.user_service = UserService(db)
        self.goal_service = GoalService(db)
        self.log_service = HabitLogService(db)

    async def _load_user_data(self, user_id: str) -> tuple[list[Goal], list[HabitLog]]:
        goals = await self.goal_service.list_goals(user_id)
        logs = await self.log_service.list_logs_for_goals([goal.id for goal in goals])
        return goals, logs

    async def personal_analytics(
        self,
        user_id: str,
        today: Optional[date] = None,
    ) -> PersonalAnalytics:
        """
        Analytics for one user.

        Raises:
            ValueError: If user not found
        """
        await self.user_service.get_user(user_id)
        goals, logs = await self._load_user_data(user_id)
        return analytics.personal_analytics(goals, logs, today or date.today())

    async def streak(self, user_id: str, today: Optional[date] = None) -> StreakInfo:
        """
        Current and longest streak for one user.

        Raises:
            ValueError: If user not found
        """
        await self.user_service.get_user(user_id)
        goals, logs = await self._load_user_data(user_id)
        return analytics.compute_streak(goals, logs, today or date.today())

    async def leaderboard(self, today: Optional[date] = None) -> list[LeaderboardEntry]:
        """Rank every live user by mean 30-day completion rate."""
        today = today or date.today()
        entries = []

        for user in await self.user_service.list_users():
            goals, logs = await self._load_user_data(user.id)
            entries.append(
                LeaderboardEntry(
                    user=user,
                    score=analytics.leaderboard_score(goals, logs, today),
                    goal_count=len(goals),
                )
            )

        return analytics.rank_entries(entries)

    async def goals_with_today_status(
        self,
        user_id: str,
        on_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> list[GoalWithTodayStatus]:
        """
        Goals scheduled on a date, each with its 30-day rate and that date's log.

        Raises:
            ValueError: If user not found
        """
        today = today or date.today()
        on_date = on_date or today

        await self.user_service.get_user(user_id)
        goals, logs = await self._load_user_data(user_id)

        logs_on_date = {log.goal_id: log for log in logs if log.date == on_date}

        return [
            GoalWithTodayStatus(
                **goal.model_dump(),
                completion_rate=analytics.completion_rate(goal, logs, 30, today),
                today_log=logs_on_date.get(goal.id),
            )
            for goal in goals
            if is_scheduled(goal, on_date)
        ]
