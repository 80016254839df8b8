"""Habit log router - API endpoints for daily outcomes."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from habit_tracker.database import get_database
from habit_tracker.models.habit_log import HabitLog, HabitLogCreate
from habit_tracker.routers.sync import get_sync_scheduler
from habit_tracker.services.habit_log_service import HabitLogService


router = APIRouter(prefix="/goals/{goal_id}/logs", tags=["logs"])


@router.put("/{log_date}", response_model=HabitLog)
async def log_habit(
    goal_id: str,
    log_date: date,
    log: HabitLogCreate,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Record the outcome of a goal on a date.

    - Replaces any earlier outcome for the same date
    - Returns 404 if goal not found
    """
    service = HabitLogService(db)
    try:
        stored = await service.log_habit(goal_id, log_date, log)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    scheduler.schedule_after_write()
    return stored


@router.get("", response_model=list[HabitLog])
async def list_logs(
    goal_id: str,
    start: Optional[date] = Query(None, description="Earliest date (inclusive)"),
    end: Optional[date] = Query(None, description="Latest date (inclusive)"),
    db=Depends(get_database),
):
    """List a goal's logs, newest first."""
    service = HabitLogService(db)
    return await service.list_logs(goal_id, start=start, end=end)


@router.get("/{log_date}", response_model=HabitLog)
async def get_log(goal_id: str, log_date: date, db=Depends(get_database)):
    """
    Get the log of a goal on a date.

    - Returns 404 if nothing was logged
    """
    service = HabitLogService(db)
    log = await service.get_log(goal_id, log_date)
    if log is None:
        raise HTTPException(status_code=404, detail="Log not found")
    return log


@router.delete("/{log_date}")
async def delete_log(
    goal_id: str,
    log_date: date,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Soft delete the log of a goal on a date.

    - Returns 404 if nothing was logged
    """
    service = HabitLogService(db)
    try:
        result = await service.delete_log(goal_id, log_date)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    scheduler.schedule_after_write()
    return result
