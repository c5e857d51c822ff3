"""System clock.

All persisted timestamps are naive UTC (the columns are ``DateTime`` without a
time zone, which SQLite and PostgreSQL both round-trip unchanged).
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
