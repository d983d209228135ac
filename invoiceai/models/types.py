"""Shared column types and defaults for the ORM models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UUIDString(TypeDecorator):
    """UUID primary/foreign keys stored as String(36) for cross-database portability."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps.

    SQLite drops tzinfo on the way back; values are re-tagged as UTC on load
    so that comparisons between stored and freshly stamped times are valid.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
