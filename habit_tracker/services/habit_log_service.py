"""Habit log service - business logic for daily goal outcomes."""
import uuid
from datetime import date
from typing import Optional

from habit_tracker.database import GOALS, HABIT_LOGS
from habit_tracker.models.habit_log import HabitLog, HabitLogCreate
from habit_tracker.utils.dates import utc_now


class HabitLogService:
    """Service for handling habit log operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.habit_logs = db[HABIT_LOGS]
        self.goals = db[GOALS]

    def _doc_to_log(self, doc: dict) -> HabitLog:
        """Convert database document to HabitLog model."""
        return HabitLog(
            _id=doc["_id"],
            goal_id=doc["goal_id"],
            date=doc["date"],
            status=doc["status"],
            value=doc.get("value"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
            is_dirty=doc.get("is_dirty", False),
            is_deleted=doc.get("is_deleted", False),
        )

    async def log_habit(
        self,
        goal_id: str,
        log_date: date,
        log_create: HabitLogCreate,
    ) -> HabitLog:
        """
        Record the outcome of a goal on a date, replacing any earlier record.

        Logs are keyed by (goal_id, date): an existing row for the key is
        updated in place (reviving it if it was soft-deleted), otherwise a new
        row is inserted.

        Args:
            goal_id: Goal ID
            log_date: Calendar date of the outcome
            log_create: Status and optional numeric value

        Returns:
            The stored log

        Raises:
            ValueError: If goal not found
        """
        goal = await self.goals.find_one({"_id": goal_id, "is_deleted": False})
        if not goal:
            raise ValueError("Goal not found")

        date_key = log_date.isoformat()
        now = utc_now()

        # Prefer the live row if a tombstone for the same key is still around
        existing = await self.habit_logs.find_one(
            {"goal_id": goal_id, "date": date_key},
            sort=[("is_deleted", 1)],
        )

        if existing:
            updated_doc = await self.habit_logs.find_one_and_update(
                {"_id": existing["_id"]},
                {
                    "$set": {
                        "status": log_create.status.value,
                        "value": log_create.value,
                        "updated_at": now,
                        "is_dirty": True,
                        "is_deleted": False,
                    }
                },
                return_document=True,
            )
            return self._doc_to_log(updated_doc)

        log_doc = {
            "_id": str(uuid.uuid4()),
            "goal_id": goal_id,
            "date": date_key,
            "status": log_create.status.value,
            "value": log_create.value,
            "created_at": now,
            "updated_at": now,
            "is_dirty": True,
            "is_deleted": False,
        }

        await self.habit_logs.insert_one(log_doc)

        return self._doc_to_log(log_doc)

    async def get_log(self, goal_id: str, log_date: date) -> Optional[HabitLog]:
        """Get the live log of a goal on a date, if any."""
        log_doc = await self.habit_logs.find_one({
            "goal_id": goal_id,
            "date": log_date.isoformat(),
            "is_deleted": False,
        })
        return self._doc_to_log(log_doc) if log_doc else None

    async def list_logs(
        self,
        goal_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[HabitLog]:
        """
        List live logs of a goal, newest date first.

        Args:
            goal_id: Goal ID
            start: Earliest date (inclusive). None = no lower bound.
            end: Latest date (inclusive). None = no upper bound.
        """
        query: dict = {"goal_id": goal_id, "is_deleted": False}

        date_range = {}
        if start:
            date_range["$gte"] = start.isoformat()
        if end:
            date_range["$lte"] = end.isoformat()
        if date_range:
            query["date"] = date_range

        cursor = self.habit_logs.find(query).sort("date", -1)
        log_docs = await cursor.to_list(length=None)

        return [self._doc_to_log(doc) for doc in log_docs]

    async def list_logs_for_goals(self, goal_ids: list[str]) -> list[HabitLog]:
        """List every live log belonging to any of the given goals."""
        if not goal_ids:
            return []

        cursor = self.habit_logs.find({
            "goal_id": {"$in": goal_ids},
            "is_deleted": False,
        })
        log_docs = await cursor.to_list(length=None)

        return [self._doc_to_log(doc) for doc in log_docs]

    async def delete_log(self, goal_id: str, log_date: date) -> dict:
        """
        Soft delete the log of a goal on a date.

        Raises:
            ValueError: If log not found
        """
        result = await self.habit_logs.update_one(
            {"goal_id": goal_id, "date": log_date.isoformat(), "is_deleted": False},
            {
                "$set": {
                    "is_deleted": True,
                    "is_dirty": True,
                    "updated_at": utc_now(),
                }
            },
        )

        if result.matched_count == 0:
            raise ValueError("Log not found")

        return {"deleted_count": result.modified_count}
