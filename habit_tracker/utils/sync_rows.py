"""Translation between local store documents and remote backend rows.

Remote rows mirror the local columns, use ``id`` for the primary key, carry
ISO-8601 timestamps and replace the ``is_deleted`` flag with a ``deleted_at``
timestamp. Dirty flags never leave the device.
"""
from habit_tracker.database import GOALS, HABIT_LOGS, USERS
from habit_tracker.utils.dates import format_timestamp, parse_timestamp


TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    USERS: ("name", "photo", "pin_hash"),
    GOALS: (
        "user_id",
        "title",
        "color",
        "kind",
        "target_value",
        "unit",
        "frequency_type",
        "frequency_data",
    ),
    HABIT_LOGS: ("goal_id", "date", "status", "value"),
}


def _columns(table: str) -> tuple[str, ...]:
    try:
        return TABLE_COLUMNS[table]
    except KeyError:
        raise ValueError(f"Unknown sync table: {table}") from None


def to_remote_row(table: str, doc: dict) -> dict:
    """Convert a local document into the remote row shape (tombstones get deleted_at = updated_at)."""
    columns = _columns(table)
    row = {
        "id": doc["_id"],
        "created_at": format_timestamp(doc["created_at"]),
        "updated_at": format_timestamp(doc["updated_at"]),
        "deleted_at": format_timestamp(doc["updated_at"]) if doc.get("is_deleted") else None,
    }
    for column in columns:
        row[column] = doc.get(column)
    return row


def to_local_row(table: str, row: dict) -> dict:
    """Convert a remote row into a clean (not dirty) local document."""
    columns = _columns(table)
    doc = {
        "_id": row["id"],
        "created_at": parse_timestamp(row["created_at"]),
        "updated_at": parse_timestamp(row["updated_at"]),
        "is_deleted": bool(row.get("deleted_at")),
        "is_dirty": False,
    }
    for column in columns:
        doc[column] = row.get(column)
    return doc
