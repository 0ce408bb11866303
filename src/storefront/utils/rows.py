"""Helpers for turning backend rows into domain objects."""

from datetime import datetime


def parse_timestamp(value) -> datetime | None:
    """Backend rows carry ISO-8601 strings; aggregates want datetimes."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def pick(row: dict, *columns: str) -> dict:
    """Keep only the columns a domain object declares."""
    return {column: row[column] for column in columns if column in row}
