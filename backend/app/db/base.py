"""Module: base."""

from datetime import UTC, datetime

from sqlalchemy.orm import DeclarativeBase


# Shared SQLAlchemy declarative base that all ORM models inherit from.
# This gives each model access to common metadata for table creation/migrations.
class Base(DeclarativeBase):
    pass


# All stored timestamps are naive UTC.
def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)
