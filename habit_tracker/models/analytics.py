"""Analytics result models."""
from pydantic import BaseModel

from habit_tracker.models.goal import Goal
from habit_tracker.models.user import User


class StreakInfo(BaseModel):
    """Consecutive fully-met scheduled days, excluding today."""

    current: int = 0
    longest: int = 0


class GoalAnalytics(BaseModel):
    """Per-goal analytics over the trailing windows."""

    goal: Goal
    completion_rate_7d: float
    completion_rate_30d: float
    completed_count: int
    skipped_count: int
    failed_count: int
    scheduled_count: int


class PersonalAnalytics(BaseModel):
    """Analytics for one user."""

    rate_7d: float
    rate_30d: float
    streak: StreakInfo
    goals: list[GoalAnalytics]
    total_completed: int
    total_skipped: int
    total_failed: int


class LeaderboardEntry(BaseModel):
    """One ranked user on the leaderboard."""

    user: User
    score: float
    goal_count: int
    rank: int = 0
