"""Goal router - API endpoints for goal management."""
from fastapi import APIRouter, Depends, HTTPException, status

from habit_tracker.database import get_database
from habit_tracker.models.goal import Goal, GoalCreate, GoalUpdate
from habit_tracker.routers.sync import get_sync_scheduler
from habit_tracker.services.goal_service import GoalService


router = APIRouter(tags=["goals"])


@router.post(
    "/users/{user_id}/goals",
    response_model=Goal,
    status_code=status.HTTP_201_CREATED,
)
async def create_goal(
    user_id: str,
    goal: GoalCreate,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Create a new goal for a profile.

    - Colour defaults to the next palette colour
    - Frequency defaults to daily
    - Returns 404 if user not found
    """
    service = GoalService(db)
    try:
        created = await service.create_goal(user_id=user_id, goal_create=goal)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    scheduler.schedule_after_write()
    return created


@router.get("/users/{user_id}/goals", response_model=list[Goal])
async def list_goals(user_id: str, db=Depends(get_database)):
    """
    List goals of a profile.

    - Excludes deleted goals
    """
    service = GoalService(db)
    return await service.list_goals(user_id=user_id)


@router.get("/goals/{goal_id}", response_model=Goal)
async def get_goal(goal_id: str, db=Depends(get_database)):
    """
    Get a single goal.

    - Returns 404 if goal not found or deleted
    """
    service = GoalService(db)
    try:
        return await service.get_goal(goal_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/goals/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    goal_update: GoalUpdate,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Update a goal.

    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        updated = await service.update_goal(goal_id=goal_id, goal_update=goal_update)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    scheduler.schedule_after_write()
    return updated


@router.delete("/goals/{goal_id}")
async def delete_goal(
    goal_id: str,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Soft delete a goal.

    - Marks the goal and its logs as deleted; they are removed after sync
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        result = await service.delete_goal(goal_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    scheduler.schedule_after_write()
    return result
