"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from habit_tracker.config import settings
from habit_tracker.database import Database
from habit_tracker.routers import analytics, goals, logs, sync, users
from habit_tracker.services.sync_scheduler import SyncScheduler
from habit_tracker.services.sync_service import SyncEngine
from habit_tracker.services.sync_store import LocalSyncStore
from habit_tracker.utils.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    database = Database(settings)
    await database.connect()

    engine = SyncEngine(LocalSyncStore(database), settings)
    scheduler = SyncScheduler(
        engine,
        debounce_seconds=settings.sync_debounce_seconds,
        initial_delay_seconds=settings.initial_sync_delay_seconds,
    )

    app.state.database = database
    app.state.sync_engine = engine
    app.state.sync_scheduler = scheduler

    scheduler.schedule_initial_sync()
    logger.info("Habit Tracker API started")
    yield

    # Shutdown
    await scheduler.aclose()
    await database.disconnect()


app = FastAPI(
    title="Habit Tracker API",
    description="Offline-first habit tracking backend",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(users.router)
app.include_router(goals.router)
app.include_router(logs.router)
app.include_router(analytics.router)
app.include_router(sync.router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "Habit Tracker API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
