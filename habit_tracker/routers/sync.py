"""Sync router - sync status, triggers and remote configuration."""
from fastapi import APIRouter, Depends, HTTPException, Request, status

from habit_tracker.models.sync import AppStateChange, RemoteConfig, SyncState
from habit_tracker.services.sync_scheduler import SyncScheduler
from habit_tracker.services.sync_service import SyncEngine


router = APIRouter(prefix="/sync", tags=["sync"])


async def get_sync_engine(request: Request) -> SyncEngine:
    """Dependency to get the sync engine created by the application lifespan."""
    engine = getattr(request.app.state, "sync_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sync engine not started",
        )
    return engine


async def get_sync_scheduler(request: Request) -> SyncScheduler:
    """Dependency to get the sync scheduler created by the application lifespan."""
    scheduler = getattr(request.app.state, "sync_scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sync scheduler not started",
        )
    return scheduler


@router.get("/status", response_model=SyncState)
async def get_status(engine: SyncEngine = Depends(get_sync_engine)):
    """
    Current sync status.

    - Includes the message of the last error, if any
    - Includes the last successful sync time and counts
    """
    return await engine.get_state()


@router.post("", response_model=SyncState)
async def sync_now(
    scheduler: SyncScheduler = Depends(get_sync_scheduler),
):
    """
    Run a sync cycle now and return the resulting state.

    - A request arriving while a cycle runs returns the current state without
      starting another cycle
    """
    await scheduler.sync_now()
    return await scheduler.engine.get_state()


@router.post("/app-state")
async def app_state_changed(
    change: AppStateChange,
    scheduler: SyncScheduler = Depends(get_sync_scheduler),
):
    """
    Report an app lifecycle transition.

    - Returning to the foreground from inactive/background triggers a sync
    """
    triggered = scheduler.notify_app_state(change.state)
    return {"state": change.state, "sync_triggered": triggered}


@router.put("/config", status_code=status.HTTP_204_NO_CONTENT)
async def save_config(
    config: RemoteConfig,
    engine: SyncEngine = Depends(get_sync_engine),
):
    """Save remote backend credentials (used from the next sync)."""
    await engine.save_remote_config(config)


@router.delete("/config", status_code=status.HTTP_204_NO_CONTENT)
async def clear_config(engine: SyncEngine = Depends(get_sync_engine)):
    """Forget saved remote backend credentials."""
    await engine.clear_remote_config()
