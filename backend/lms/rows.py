"""Helpers for reading fetched rows that may be ORM objects or plain dicts."""

from datetime import date, datetime, timezone
from typing import Any, Optional


def value_of(row: Any, name: str, default: Any = None) -> Any:
    """Read a column from an ORM row or a dict row."""
    if isinstance(row, dict):
        return row.get(name, default)
    return getattr(row, name, default)


def row_id(row: Any) -> Any:
    """Id of a row, or the value itself when a bare id is passed."""
    if isinstance(row, (str, int)):
        return row
    return value_of(row, "id")


def as_utc(value: Any) -> Optional[datetime]:
    """Parse ISO strings and treat naive datetimes as UTC."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def timestamp_text(value: Any) -> str:
    """ISO text of a timestamp column ('' when unset)."""
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)
