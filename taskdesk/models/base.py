from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp; stored the same way on SQLite and Postgres."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
