"""Analytics engine: completion rates, streaks and leaderboard ranking.

All functions here are pure computations over goals and logs already loaded
from the local store. ``today`` is always passed in so results are reproducible.
"""
from collections import Counter
from datetime import date, timedelta
from typing import Iterable

from habit_tracker.models.analytics import (
    GoalAnalytics,
    LeaderboardEntry,
    PersonalAnalytics,
    StreakInfo,
)
from habit_tracker.models.goal import Goal
from habit_tracker.models.habit_log import HabitLog, HabitStatus
from habit_tracker.utils.dates import as_date
from habit_tracker.utils.frequency import count_scheduled_in_range, is_scheduled


STREAK_MAX_DAYS = 365
RANK_TIE_TOLERANCE = 0.001


def window_start(goal: Goal, window_days: int, today: date) -> date:
    """Start of a trailing window, never earlier than the goal's creation date."""
    return max(as_date(goal.created_at), today - timedelta(days=window_days))


def _live_logs_in_range(
    goal: Goal,
    logs: Iterable[HabitLog],
    start: date,
    end: date,
) -> list[HabitLog]:
    return [
        log
        for log in logs
        if log.goal_id == goal.id and not log.is_deleted and start <= log.date <= end
    ]


def completion_rate(
    goal: Goal,
    logs: Iterable[HabitLog],
    window_days: int,
    today: date,
) -> float:
    """
    Completed logs divided by scheduled days over a trailing window.

    Args:
        goal: Goal to score
        logs: Logs of the goal (others are ignored)
        window_days: Window length; the window is [today - window_days, today]
        today: Reference date

    Returns:
        The completion ratio, or 1.0 when nothing was scheduled in the window
    """
    start = window_start(goal, window_days, today)
    scheduled_days = count_scheduled_in_range(goal, start, today)

    if scheduled_days == 0:
        return 1.0

    completed = sum(
        1
        for log in _live_logs_in_range(goal, logs, start, today)
        if log.status == HabitStatus.COMPLETED
    )
    return completed / scheduled_days


def status_counts(
    goal: Goal,
    logs: Iterable[HabitLog],
    window_days: int,
    today: date,
) -> Counter:
    """Count logs per status over a trailing window."""
    start = window_start(goal, window_days, today)
    return Counter(log.status for log in _live_logs_in_range(goal, logs, start, today))


def compute_streak(
    goals: list[Goal],
    logs: Iterable[HabitLog],
    today: date,
    max_days: int = STREAK_MAX_DAYS,
) -> StreakInfo:
    """
    Walk backward from yesterday and measure runs of fully-met days.

    A day counts only if at least one existing goal is scheduled on it; such a
    day is met when every scheduled goal has a completed log. Today is
    excluded because it is still in progress.
    """
    if not goals:
        return StreakInfo(current=0, longest=0)

    completed = {
        (log.goal_id, log.date)
        for log in logs
        if not log.is_deleted and log.status == HabitStatus.COMPLETED
    }

    current = 0
    longest = 0
    running = 0
    broken = False

    for offset in range(1, max_days + 1):
        day = today - timedelta(days=offset)
        scheduled = [
            goal
            for goal in goals
            if as_date(goal.created_at) <= day and is_scheduled(goal, day)
        ]

        if not scheduled:
            continue

        done = sum(1 for goal in scheduled if (goal.id, day) in completed)

        if done >= len(scheduled):
            running += 1
            if not broken:
                current = running
            longest = max(longest, running)
        else:
            broken = True
            running = 0

    return StreakInfo(current=current, longest=longest)


def personal_analytics(
    goals: list[Goal],
    logs: list[HabitLog],
    today: date,
) -> PersonalAnalytics:
    """Per-goal rates and counts, overall mean rates, totals and streak for one user."""
    goal_analytics: list[GoalAnalytics] = []

    for goal in goals:
        counts = status_counts(goal, logs, 30, today)
        goal_analytics.append(
            GoalAnalytics(
                goal=goal,
                completion_rate_7d=completion_rate(goal, logs, 7, today),
                completion_rate_30d=completion_rate(goal, logs, 30, today),
                completed_count=counts[HabitStatus.COMPLETED],
                skipped_count=counts[HabitStatus.SKIPPED],
                failed_count=counts[HabitStatus.FAILED],
                scheduled_count=count_scheduled_in_range(
                    goal, window_start(goal, 30, today), today
                ),
            )
        )

    if goal_analytics:
        rate_7d = sum(g.completion_rate_7d for g in goal_analytics) / len(goal_analytics)
        rate_30d = sum(g.completion_rate_30d for g in goal_analytics) / len(goal_analytics)
    else:
        rate_7d = 0.0
        rate_30d = 0.0

    return PersonalAnalytics(
        rate_7d=rate_7d,
        rate_30d=rate_30d,
        streak=compute_streak(goals, logs, today),
        goals=goal_analytics,
        total_completed=sum(g.completed_count for g in goal_analytics),
        total_skipped=sum(g.skipped_count for g in goal_analytics),
        total_failed=sum(g.failed_count for g in goal_analytics),
    )


def leaderboard_score(goals: list[Goal], logs: list[HabitLog], today: date) -> float:
    """Mean 30-day completion rate across a user's goals (0 with no goals)."""
    if not goals:
        return 0.0
    return sum(completion_rate(goal, logs, 30, today) for goal in goals) / len(goals)


def rank_entries(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """
    Sort entries by descending score and assign ranks.

    An entry whose score is within RANK_TIE_TOLERANCE of its predecessor shares
    the predecessor's rank; otherwise its rank is its 1-based position, so a
    tie at rank 1 is followed by rank 3.
    """
    ranked = sorted(entries, key=lambda entry: entry.score, reverse=True)

    for index, entry in enumerate(ranked):
        previous = ranked[index - 1] if index > 0 else None
        if previous is not None and abs(entry.score - previous.score) < RANK_TIE_TOLERANCE:
            entry.rank = previous.rank
        else:
            entry.rank = index + 1

    return ranked
