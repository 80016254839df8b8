"""Tests for UserService."""
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock


def _collection(found=None):
    """Motor-like collection: async single-document calls, sync find() cursors."""
    collection = MagicMock()
    for name in ("find_one", "insert_one", "update_one", "update_many", "find_one_and_update"):
        setattr(collection, name, AsyncMock())
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=found or [])
    collection.find.return_value = cursor
    return collection


def _mock_db(**collections):
    mock_db = MagicMock()
    mock_db.__getitem__.side_effect = lambda name: collections.setdefault(name, _collection())
    return mock_db


def _user_doc(user_id="u1", pin="1234", **extra):
    from habit_tracker.utils.pin import hash_pin

    doc = {
        "_id": user_id,
        "name": "Alice",
        "photo": None,
        "pin_hash": hash_pin(pin),
        "created_at": datetime(2025, 3, 1),
        "updated_at": datetime(2025, 3, 1),
        "is_dirty": False,
        "is_deleted": False,
    }
    doc.update(extra)
    return doc


@pytest.mark.asyncio
class TestUserServiceCreate:
    """Tests for creating users."""

    async def test_create_user_hashes_pin(self):
        """Test the stored document has a hash and the result has none."""
        from habit_tracker.models.user import UserCreate
        from habit_tracker.services.user_service import UserService
        from habit_tracker.utils.pin import hash_pin

        users = _collection()
        service = UserService(_mock_db(users=users))

        user = await service.create_user(UserCreate(name="Alice", pin="1234"))

        stored = users.insert_one.call_args.args[0]
        assert stored["pin_hash"] == hash_pin("1234")
        assert "pin" not in stored
        assert stored["is_dirty"] is True
        assert stored["is_deleted"] is False
        assert len(stored["_id"]) == 36
        assert user.id == stored["_id"]
        assert user.name == "Alice"
        assert not hasattr(user, "pin_hash")


@pytest.mark.asyncio
class TestUserServiceRead:
    """Tests for reading users."""

    async def test_list_users(self):
        from habit_tracker.services.user_service import UserService

        users = _collection(found=[_user_doc("u1"), _user_doc("u2", name="Bob")])
        service = UserService(_mock_db(users=users))

        result = await service.list_users()

        assert [user.id for user in result] == ["u1", "u2"]
        users.find.assert_called_once_with({"is_deleted": False})

    async def test_get_user_not_found(self):
        from habit_tracker.services.user_service import UserService

        users = _collection()
        users.find_one.return_value = None
        service = UserService(_mock_db(users=users))

        with pytest.raises(ValueError, match="User not found"):
            await service.get_user("missing")


@pytest.mark.asyncio
class TestUserServiceUpdate:
    """Tests for updating users."""

    async def test_update_rehashes_pin(self):
        from habit_tracker.models.user import UserUpdate
        from habit_tracker.services.user_service import UserService
        from habit_tracker.utils.pin import hash_pin

        users = _collection()
        users.find_one.return_value = _user_doc()
        users.find_one_and_update.return_value = _user_doc(pin="9999", is_dirty=True)
        service = UserService(_mock_db(users=users))

        await service.update_user("u1", UserUpdate(pin="9999"))

        update = users.find_one_and_update.call_args.args[1]["$set"]
        assert update["pin_hash"] == hash_pin("9999")
        assert update["is_dirty"] is True
        assert "name" not in update


@pytest.mark.asyncio
class TestUserServiceVerifyPin:
    """Tests for PIN verification."""

    async def test_verify_pin(self):
        from habit_tracker.services.user_service import UserService

        users = _collection()
        users.find_one.return_value = _user_doc(pin="1234")
        service = UserService(_mock_db(users=users))

        assert await service.verify_pin("u1", "1234") is True
        assert await service.verify_pin("u1", "0000") is False

    async def test_verify_pin_unknown_user(self):
        from habit_tracker.services.user_service import UserService

        users = _collection()
        users.find_one.return_value = None
        service = UserService(_mock_db(users=users))

        assert await service.verify_pin("missing", "1234") is False


@pytest.mark.asyncio
class TestUserServiceDelete:
    """Tests for deleting users."""

    async def test_delete_cascades_to_goals_and_logs(self):
        """Test the user, its goals and their logs are all tombstoned."""
        from habit_tracker.services.user_service import UserService

        users = _collection()
        users.find_one.return_value = _user_doc()
        users.update_one.return_value = MagicMock(modified_count=1)
        goals = _collection(found=[{"_id": "g1"}, {"_id": "g2"}])
        goals.update_many.return_value = MagicMock(modified_count=2)
        habit_logs = _collection()
        habit_logs.update_many.return_value = MagicMock(modified_count=5)
        service = UserService(_mock_db(users=users, goals=goals, habit_logs=habit_logs))

        result = await service.delete_user("u1")

        assert result == {"users": 1, "goals": 2, "habit_logs": 5}
        log_query, log_update = habit_logs.update_many.call_args.args
        assert log_query["goal_id"] == {"$in": ["g1", "g2"]}
        assert log_update["$set"]["is_deleted"] is True
        assert log_update["$set"]["is_dirty"] is True
