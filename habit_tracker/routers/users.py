"""User router - API endpoints for local profiles."""
from fastapi import APIRouter, Depends, HTTPException, status

from habit_tracker.database import get_database
from habit_tracker.models.user import (
    PinVerification,
    PinVerificationResult,
    User,
    UserCreate,
    UserUpdate,
)
from habit_tracker.routers.sync import get_sync_scheduler
from habit_tracker.services.user_service import UserService


router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Create a new profile.

    - PIN is stored hashed
    - Schedules a sync
    """
    service = UserService(db)
    created = await service.create_user(user)
    scheduler.schedule_after_write()
    return created


@router.get("", response_model=list[User])
async def list_users(db=Depends(get_database)):
    """List all profiles."""
    service = UserService(db)
    return await service.list_users()


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: str, db=Depends(get_database)):
    """
    Get a single profile.

    - Returns 404 if user not found or deleted
    """
    service = UserService(db)
    try:
        return await service.get_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    user_update: UserUpdate,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Update a profile.

    - A new PIN is re-hashed
    - Returns 404 if user not found
    """
    service = UserService(db)
    try:
        updated = await service.update_user(user_id, user_update)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    scheduler.schedule_after_write()
    return updated


@router.post("/{user_id}/verify-pin", response_model=PinVerificationResult)
async def verify_pin(
    user_id: str,
    verification: PinVerification,
    db=Depends(get_database),
):
    """Check a profile PIN."""
    service = UserService(db)
    return PinVerificationResult(valid=await service.verify_pin(user_id, verification.pin))


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    db=Depends(get_database),
    scheduler=Depends(get_sync_scheduler),
):
    """
    Soft delete a profile.

    - Cascades to the profile's goals and their logs
    - Returns 404 if user not found
    """
    service = UserService(db)
    try:
        result = await service.delete_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    scheduler.schedule_after_write()
    return result
