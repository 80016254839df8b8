"""Local store operations used by the sync engine."""
from datetime import datetime
from typing import Optional

from loguru import logger

from habit_tracker.database import HABIT_LOGS, SYNC_META, SYNC_TABLES, Database
from habit_tracker.models.sync import ReconcileOutcome


def resolve_remote_row(local: Optional[dict], remote: dict) -> ReconcileOutcome:
    """
    Decide how a pulled row is applied to the local store (last write wins per row).

    Args:
        local: Local document with the same id, or None
        remote: Pulled row already converted to the local shape

    Returns:
        INSERTED or SKIPPED_TOMBSTONE when there is no local row;
        LOCAL_WINS when the local row is dirty and at least as new;
        otherwise DELETED for remote tombstones and OVERWRITTEN for live rows.
    """
    if local is None:
        if remote["is_deleted"]:
            return ReconcileOutcome.SKIPPED_TOMBSTONE
        return ReconcileOutcome.INSERTED

    if local.get("is_dirty") and local["updated_at"] >= remote["updated_at"]:
        return ReconcileOutcome.LOCAL_WINS

    if remote["is_deleted"]:
        return ReconcileOutcome.DELETED
    return ReconcileOutcome.OVERWRITTEN


class LocalSyncStore:
    """Dirty-row scans, reconciliation, tombstone purge and sync metadata."""

    def __init__(self, database: Database):
        """Initialize with the (possibly not yet connected) local store."""
        self.database = database

    def _collection(self, table: str):
        return self.database.get_collection(table)

    async def get_dirty_rows(self, table: str) -> list[dict]:
        """Return every local row not yet pushed, tombstones included."""
        cursor = self._collection(table).find({"is_dirty": True})
        return await cursor.to_list(length=None)

    async def clear_dirty_flag(self, table: str, row_id: str, updated_at: datetime) -> bool:
        """
        Mark a pushed row clean.

        The flag is only cleared if the row still has the timestamp that was
        pushed, so an edit made during the push stays dirty.

        Returns:
            True if the row was marked clean
        """
        result = await self._collection(table).update_one(
            {"_id": row_id, "updated_at": updated_at},
            {"$set": {"is_dirty": False}},
        )
        return result.modified_count > 0

    async def upsert_from_remote(self, table: str, row: dict) -> ReconcileOutcome:
        """
        Apply one pulled row to the local store.

        Args:
            table: Sync table name
            row: Pulled row already converted to the local shape

        Returns:
            What was done with the row
        """
        collection = self._collection(table)
        local = await collection.find_one({"_id": row["_id"]})
        outcome = resolve_remote_row(local, row)

        if outcome is ReconcileOutcome.INSERTED:
            if table == HABIT_LOGS and not await self._claim_log_key(collection, row):
                outcome = ReconcileOutcome.LOCAL_WINS
            else:
                await collection.insert_one(row)
        elif outcome is ReconcileOutcome.DELETED:
            await collection.delete_one({"_id": row["_id"]})
        elif outcome is ReconcileOutcome.OVERWRITTEN:
            fields = {key: value for key, value in row.items() if key != "_id"}
            fields["is_dirty"] = False
            await collection.update_one({"_id": row["_id"]}, {"$set": fields})

        logger.debug("Reconciled {} {}: {}", table, row["_id"], outcome.value)
        return outcome

    async def _claim_log_key(self, collection, row: dict) -> bool:
        """
        Make room for a pulled log whose (goal_id, date) is held by another live row.

        The newer of the two rows wins; a losing local row is removed.

        Returns:
            True if the pulled row may be inserted
        """
        occupant = await collection.find_one({
            "goal_id": row["goal_id"],
            "date": row["date"],
            "is_deleted": False,
            "_id": {"$ne": row["_id"]},
        })

        if occupant is None:
            return True
        if occupant["updated_at"] > row["updated_at"]:
            return False

        await collection.delete_one({"_id": occupant["_id"]})
        return True

    async def purge_deleted_rows(self) -> dict[str, int]:
        """
        Physically delete tombstones that are already synced.

        Children go first (habit_logs, goals, users).

        Returns:
            Number of purged rows per table
        """
        purged = {}
        for table in reversed(SYNC_TABLES):
            result = await self._collection(table).delete_many(
                {"is_deleted": True, "is_dirty": False}
            )
            purged[table] = result.deleted_count
        return purged

    async def get_sync_meta(self, key: str) -> Optional[str]:
        """Read a metadata value."""
        doc = await self._collection(SYNC_META).find_one({"_id": key})
        return doc["value"] if doc else None

    async def set_sync_meta(self, key: str, value: str) -> None:
        """Write a metadata value."""
        await self._collection(SYNC_META).update_one(
            {"_id": key},
            {"$set": {"value": value}},
            upsert=True,
        )

    async def delete_sync_meta(self, key: str) -> None:
        """Remove a metadata value."""
        await self._collection(SYNC_META).delete_one({"_id": key})
