"""Analytics router - personal analytics, streaks, leaderboard and dashboard layout."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from habit_tracker.database import get_database
from habit_tracker.models.analytics import LeaderboardEntry, PersonalAnalytics, StreakInfo
from habit_tracker.models.layout import TileLayoutResult
from habit_tracker.services.analytics_service import AnalyticsService
from habit_tracker.utils.tile_layout import layout


router = APIRouter(tags=["analytics"])


@router.get("/users/{user_id}/analytics", response_model=PersonalAnalytics)
async def personal_analytics(user_id: str, db=Depends(get_database)):
    """
    Completion rates, status counts and streak for a profile.

    - Returns 404 if user not found
    """
    service = AnalyticsService(db)
    try:
        return await service.personal_analytics(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/users/{user_id}/streak", response_model=StreakInfo)
async def streak(user_id: str, db=Depends(get_database)):
    """
    Current and longest streak for a profile.

    - Returns 404 if user not found
    """
    service = AnalyticsService(db)
    try:
        return await service.streak(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(db=Depends(get_database)):
    """All profiles ranked by mean 30-day completion rate."""
    service = AnalyticsService(db)
    return await service.leaderboard()


@router.get("/users/{user_id}/dashboard", response_model=TileLayoutResult)
async def dashboard(
    user_id: str,
    width: float = Query(..., gt=0, description="Viewport width in pixels"),
    height: float = Query(..., gt=0, description="Viewport height in pixels"),
    on_date: Optional[date] = Query(None, description="Day to show (defaults to today)"),
    db=Depends(get_database),
):
    """
    Tile layout of the goals still open on a day.

    - Goals already logged that day get no tile
    - overflow_count reports goals that did not fit the viewport
    - Returns 404 if user not found
    """
    service = AnalyticsService(db)
    try:
        goals = await service.goals_with_today_status(user_id, on_date=on_date)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return layout(goals, width, height)
