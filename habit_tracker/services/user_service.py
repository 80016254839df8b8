"""User service - business logic for local profiles."""
import uuid

from habit_tracker.database import GOALS, HABIT_LOGS, USERS
from habit_tracker.models.user import User, UserCreate, UserUpdate
from habit_tracker.utils.dates import utc_now
from habit_tracker.utils.pin import hash_pin, verify_pin


class UserService:
    """Service for handling user (profile) operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db[USERS]
        self.goals = db[GOALS]
        self.habit_logs = db[HABIT_LOGS]

    def _doc_to_user(self, doc: dict) -> User:
        """Convert database document to User model (the PIN hash stays in the store)."""
        return User(
            _id=doc["_id"],
            name=doc["name"],
            photo=doc.get("photo"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
            is_dirty=doc.get("is_dirty", False),
            is_deleted=doc.get("is_deleted", False),
        )

    async def _get_user_doc(self, user_id: str) -> dict:
        user_doc = await self.users.find_one({"_id": user_id, "is_deleted": False})
        if not user_doc:
            raise ValueError("User not found")
        return user_doc

    async def create_user(self, user_create: UserCreate) -> User:
        """
        Create a new profile.

        Args:
            user_create: Profile data with plain PIN

        Returns:
            Created user (without PIN hash)
        """
        now = utc_now()
        user_doc = {
            "_id": str(uuid.uuid4()),
            "name": user_create.name,
            "photo": user_create.photo,
            "pin_hash": hash_pin(user_create.pin),
            "created_at": now,
            "updated_at": now,
            "is_dirty": True,
            "is_deleted": False,
        }

        await self.users.insert_one(user_doc)

        return self._doc_to_user(user_doc)

    async def list_users(self) -> list[User]:
        """List all live profiles in creation order."""
        cursor = self.users.find({"is_deleted": False}).sort("created_at", 1)
        user_docs = await cursor.to_list(length=None)
        return [self._doc_to_user(doc) for doc in user_docs]

    async def get_user(self, user_id: str) -> User:
        """
        Get a single profile.

        Raises:
            ValueError: If user not found
        """
        user_doc = await self._get_user_doc(user_id)
        return self._doc_to_user(user_doc)

    async def update_user(self, user_id: str, user_update: UserUpdate) -> User:
        """
        Update a profile; a new PIN is re-hashed.

        Raises:
            ValueError: If user not found
        """
        await self._get_user_doc(user_id)

        update_doc = {
            "updated_at": utc_now(),
            "is_dirty": True,
        }
        if user_update.name is not None:
            update_doc["name"] = user_update.name
        if user_update.photo is not None:
            update_doc["photo"] = user_update.photo
        if user_update.pin is not None:
            update_doc["pin_hash"] = hash_pin(user_update.pin)

        updated_doc = await self.users.find_one_and_update(
            {"_id": user_id, "is_deleted": False},
            {"$set": update_doc},
            return_document=True,
        )

        return self._doc_to_user(updated_doc)

    async def verify_pin(self, user_id: str, pin: str) -> bool:
        """Check a PIN against the stored hash; unknown users never verify."""
        user_doc = await self.users.find_one({"_id": user_id, "is_deleted": False})
        if not user_doc:
            return False
        return verify_pin(pin, user_doc["pin_hash"])

    async def delete_user(self, user_id: str) -> dict:
        """
        Soft delete a profile together with its goals and their logs.

        Returns:
            Dictionary with the number of tombstoned rows per table

        Raises:
            ValueError: If user not found
        """
        await self._get_user_doc(user_id)

        tombstone = {
            "$set": {
                "is_deleted": True,
                "is_dirty": True,
                "updated_at": utc_now(),
            }
        }

        goal_docs = await self.goals.find(
            {"user_id": user_id, "is_deleted": False},
            {"_id": 1},
        ).to_list(length=None)
        goal_ids = [doc["_id"] for doc in goal_docs]

        user_result = await self.users.update_one({"_id": user_id}, tombstone)
        goals_result = await self.goals.update_many(
            {"_id": {"$in": goal_ids}, "is_deleted": False},
            tombstone,
        )
        logs_result = await self.habit_logs.update_many(
            {"goal_id": {"$in": goal_ids}, "is_deleted": False},
            tombstone,
        )

        return {
            USERS: user_result.modified_count,
            GOALS: goals_result.modified_count,
            HABIT_LOGS: logs_result.modified_count,
        }
