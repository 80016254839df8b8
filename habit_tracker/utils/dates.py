"""Calendar-date and timestamp helpers shared by the store, engines and sync."""
from datetime import date, datetime, timezone
from typing import Union


DateLike = Union[date, datetime, str]


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime truncated to milliseconds.

    MongoDB keeps millisecond precision, so timestamps are truncated up front
    to compare equal after a round trip through the store.
    """
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def as_date(value: DateLike) -> date:
    """
    Coerce a date, datetime or ISO string into a calendar date.

    Examples:
        >>> as_date("2025-03-04")
        datetime.date(2025, 3, 4)
        >>> as_date("2025-03-04T22:10:00Z")
        datetime.date(2025, 3, 4)
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def parse_timestamp(value: Union[datetime, str, None]) -> datetime | None:
    """Parse an ISO-8601 timestamp into a naive UTC datetime."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_timestamp(value: datetime | None) -> str | None:
    """Render a naive UTC datetime as an ISO-8601 string with an explicit offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
