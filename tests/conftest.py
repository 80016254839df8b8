"""Pytest configuration and fixtures."""
from datetime import date, datetime

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from habit_tracker.main import app
from habit_tracker.config import settings


def make_goal(
    goal_id="goal-1",
    frequency=None,
    created_at=datetime(2025, 1, 1, 8, 0),
    user_id="user-1",
    **extra,
):
    """Build a Goal for pure engine tests."""
    from habit_tracker.models.frequency import DailyFrequency
    from habit_tracker.models.goal import Goal

    return Goal(
        id=goal_id,
        user_id=user_id,
        title=extra.pop("title", f"Goal {goal_id}"),
        color=extra.pop("color", "#6200ee"),
        frequency=frequency or DailyFrequency(),
        created_at=created_at,
        updated_at=created_at,
        **extra,
    )


def make_log(goal_id, day, status="completed", log_id=None, is_deleted=False):
    """Build a HabitLog for pure engine tests."""
    from habit_tracker.models.habit_log import HabitLog

    stamp = datetime.combine(day, datetime.min.time())
    return HabitLog(
        id=log_id or f"{goal_id}-{day.isoformat()}",
        goal_id=goal_id,
        date=day,
        status=status,
        created_at=stamp,
        updated_at=stamp,
        is_deleted=is_deleted,
    )


def make_tile_goal(goal_id, completion_rate=0.5, today_log=None):
    """Build a GoalWithTodayStatus for layout tests."""
    from habit_tracker.models.goal import GoalWithTodayStatus

    goal = make_goal(goal_id=goal_id)
    return GoalWithTodayStatus(
        **goal.model_dump(),
        completion_rate=completion_rate,
        today_log=today_log,
    )


@pytest.fixture
def goal_factory():
    """Factory for Goal objects."""
    return make_goal


@pytest.fixture
def log_factory():
    """Factory for HabitLog objects."""
    return make_log


@pytest.fixture
def tile_goal_factory():
    """Factory for GoalWithTodayStatus objects."""
    return make_tile_goal


@pytest.fixture
def today():
    """Fixed reference date (a Saturday)."""
    return date(2025, 3, 15)


@pytest_asyncio.fixture
async def app_client():
    """
    Create a test client with a clean test database.

    This fixture:
    - Skips when no MongoDB server is reachable
    - Opens a test database and wires the sync engine and scheduler onto app.state
    - Yields an async HTTP client for testing
    - Cleans up the test database after each test
    """
    from habit_tracker.database import Database
    from habit_tracker.services.sync_scheduler import SyncScheduler
    from habit_tracker.services.sync_service import SyncEngine
    from habit_tracker.services.sync_store import LocalSyncStore

    probe = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=500)
    try:
        await probe.admin.command("ping")
    except PyMongoError:
        pytest.skip("MongoDB is not reachable")
    finally:
        probe.close()

    test_settings = settings.model_copy(update={
        "mongodb_db_name": f"{settings.mongodb_db_name}_test",
        "remote_url": None,
        "remote_api_key": None,
    })
    database = Database(test_settings)
    await database.connect()

    async def always_online():
        return True

    engine = SyncEngine(
        LocalSyncStore(database),
        test_settings,
        connectivity_check=always_online,
    )
    # Long debounce so writes never trigger a sync during a test
    scheduler = SyncScheduler(engine, debounce_seconds=3600, initial_delay_seconds=3600)

    app.state.database = database
    app.state.sync_engine = engine
    app.state.sync_scheduler = scheduler

    # Create HTTP client
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    # Cleanup: drop test database
    await scheduler.aclose()
    await database.client.drop_database(test_settings.mongodb_db_name)
    await database.disconnect()

    app.state.database = None
    app.state.sync_engine = None
    app.state.sync_scheduler = None
