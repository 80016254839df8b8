"""MongoDB local store connection using Motor (async driver)."""
from fastapi import Request
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from habit_tracker.config import Settings, settings as default_settings


USERS = "users"
GOALS = "goals"
HABIT_LOGS = "habit_logs"
SYNC_META = "sync_meta"

# Parent-before-child order; purges walk it in reverse
SYNC_TABLES = (USERS, GOALS, HABIT_LOGS)


class StoreNotInitializedError(RuntimeError):
    """Raised when the local store is used before connect() or after disconnect()."""


class Database:
    """MongoDB local store connection manager."""

    def __init__(self, config: Settings | None = None):
        self.config = config or default_settings
        self.client: AsyncIOMotorClient | None = None
        self.db: AsyncIOMotorDatabase | None = None

    @property
    def is_connected(self) -> bool:
        return self.db is not None

    async def connect(self) -> None:
        """Open the local store and ensure its indexes exist."""
        self.client = AsyncIOMotorClient(self.config.mongodb_url)
        self.db = self.client[self.config.mongodb_db_name]
        await self._ensure_indexes()
        logger.info("Connected to local store: {}", self.config.mongodb_db_name)

    async def disconnect(self) -> None:
        """Close the local store."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from local store")
        self.client = None
        self.db = None

    async def _ensure_indexes(self) -> None:
        await self.db[GOALS].create_index("user_id")
        await self.db[HABIT_LOGS].create_index([("goal_id", 1), ("date", 1)])
        await self.db[HABIT_LOGS].create_index("date")
        for table in SYNC_TABLES:
            await self.db[table].create_index("is_dirty")

    def get_db(self) -> AsyncIOMotorDatabase:
        """Return the connected database, failing loudly if it is not open."""
        if self.db is None:
            raise StoreNotInitializedError("Database not connected")
        return self.db

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        return self.get_db()[name]


async def get_database(request: Request) -> AsyncIOMotorDatabase:
    """Dependency to get the database opened by the application lifespan."""
    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise StoreNotInitializedError("Database not connected")
    return database.get_db()
