"""Goal service - business logic for goal management."""
import uuid

from habit_tracker.database import GOALS, HABIT_LOGS, USERS
from habit_tracker.models.goal import Goal, GoalCreate, GoalUpdate
from habit_tracker.utils.dates import utc_now
from habit_tracker.utils.frequency import parse_frequency, serialize_frequency


GOAL_COLORS = [
    "#6200ee",
    "#03dac6",
    "#ff6f00",
    "#c51162",
    "#00c853",
    "#2979ff",
    "#d50000",
    "#aa00ff",
    "#00bfa5",
    "#ff6d00",
]


def color_for_goal(index: int) -> str:
    """
    Pick a palette colour for the n-th goal of a user.

    Examples:
        >>> color_for_goal(0)
        '#6200ee'
        >>> color_for_goal(10)
        '#6200ee'
    """
    return GOAL_COLORS[index % len(GOAL_COLORS)]


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.goals = db[GOALS]
        self.users = db[USERS]
        self.habit_logs = db[HABIT_LOGS]

    def _doc_to_goal(self, doc: dict) -> Goal:
        """
        Convert database document to Goal model.

        Rebuilds the frequency from its two stored columns.
        """
        return Goal(
            _id=doc["_id"],
            user_id=doc["user_id"],
            title=doc["title"],
            color=doc["color"],
            kind=doc.get("kind", "checkbox"),
            target_value=doc.get("target_value"),
            unit=doc.get("unit"),
            frequency=parse_frequency(doc.get("frequency_type"), doc.get("frequency_data")),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
            is_dirty=doc.get("is_dirty", False),
            is_deleted=doc.get("is_deleted", False),
        )

    async def create_goal(
        self,
        user_id: str,
        goal_create: GoalCreate,
    ) -> Goal:
        """
        Create a new goal.

        Args:
            user_id: User ID who owns the goal
            goal_create: Goal creation data

        Returns:
            Created goal object

        Raises:
            ValueError: If the user does not exist
        """
        user = await self.users.find_one({"_id": user_id, "is_deleted": False})
        if not user:
            raise ValueError("User not found")

        color = goal_create.color
        if not color:
            existing_count = await self.goals.count_documents(
                {"user_id": user_id, "is_deleted": False}
            )
            color = color_for_goal(existing_count)

        frequency_type, frequency_data = serialize_frequency(goal_create.frequency)
        now = utc_now()

        goal_doc = {
            "_id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": goal_create.title,
            "color": color,
            "kind": goal_create.kind.value,
            "target_value": goal_create.target_value,
            "unit": goal_create.unit,
            "frequency_type": frequency_type,
            "frequency_data": frequency_data,
            "created_at": now,
            "updated_at": now,
            "is_dirty": True,
            "is_deleted": False,
        }

        await self.goals.insert_one(goal_doc)

        return self._doc_to_goal(goal_doc)

    async def list_goals(
        self,
        user_id: str,
    ) -> list[Goal]:
        """
        List live goals for a user in creation order.

        Args:
            user_id: User ID

        Returns:
            List of goals
        """
        cursor = self.goals.find({
            "user_id": user_id,
            "is_deleted": False,
        }).sort("created_at", 1)
        goal_docs = await cursor.to_list(length=None)

        return [self._doc_to_goal(doc) for doc in goal_docs]

    async def get_goal(
        self,
        goal_id: str,
    ) -> Goal:
        """
        Get a single goal.

        Raises:
            ValueError: If goal not found
        """
        goal_doc = await self.goals.find_one({
            "_id": goal_id,
            "is_deleted": False,
        })

        if not goal_doc:
            raise ValueError("Goal not found")

        return self._doc_to_goal(goal_doc)

    async def update_goal(
        self,
        goal_id: str,
        goal_update: GoalUpdate,
    ) -> Goal:
        """
        Update a goal.

        Args:
            goal_id: Goal ID
            goal_update: Update data

        Returns:
            Updated goal

        Raises:
            ValueError: If goal not found
        """
        existing = await self.goals.find_one({
            "_id": goal_id,
            "is_deleted": False,
        })

        if not existing:
            raise ValueError("Goal not found")

        update_doc = {
            "updated_at": utc_now(),
            "is_dirty": True,
        }

        if goal_update.title is not None:
            update_doc["title"] = goal_update.title
        if goal_update.color is not None:
            update_doc["color"] = goal_update.color
        if goal_update.kind is not None:
            update_doc["kind"] = goal_update.kind.value
        if goal_update.target_value is not None:
            update_doc["target_value"] = goal_update.target_value
        if goal_update.unit is not None:
            update_doc["unit"] = goal_update.unit
        if goal_update.frequency is not None:
            frequency_type, frequency_data = serialize_frequency(goal_update.frequency)
            update_doc["frequency_type"] = frequency_type
            update_doc["frequency_data"] = frequency_data

        updated_doc = await self.goals.find_one_and_update(
            {"_id": goal_id, "is_deleted": False},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_goal(updated_doc)

    async def delete_goal(
        self,
        goal_id: str,
    ) -> dict:
        """
        Soft delete a goal and its habit logs.

        Args:
            goal_id: Goal ID

        Returns:
            Dictionary with deleted_count and deleted_logs

        Raises:
            ValueError: If goal not found
        """
        existing = await self.goals.find_one({
            "_id": goal_id,
            "is_deleted": False,
        })

        if not existing:
            raise ValueError("Goal not found")

        tombstone = {
            "$set": {
                "is_deleted": True,
                "is_dirty": True,
                "updated_at": utc_now(),
            }
        }

        result = await self.goals.update_one({"_id": goal_id}, tombstone)
        logs_result = await self.habit_logs.update_many(
            {"goal_id": goal_id, "is_deleted": False},
            tombstone,
        )

        return {
            "deleted_count": result.modified_count,
            "deleted_logs": logs_result.modified_count,
        }

