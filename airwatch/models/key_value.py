"""
KeyValue model - small persisted blobs keyed by name.

Used for state that must survive a restart but has no relational shape,
such as the connectivity manager's offline cache mirror.
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from airwatch.models.base import Base


class KeyValue(Base):
    """A JSON value stored under a unique key."""

    __tablename__ = 'key_values'

    key: Mapped[str] = mapped_column(String(128), primary_key=True)

    value: Mapped[str] = mapped_column(Text, nullable=False, comment='JSON-encoded value')

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
