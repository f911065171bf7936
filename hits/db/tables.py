"""SQLAlchemy table definitions.

One row per (key, UTC minute) window.  The total for a key is the sum of
its windows; the store never reads or writes individual windows outside
the increment-and-total statement pair in PgCounterStore.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from hits.db.engine import Base


class CounterRow(Base):
    __tablename__ = "counters"
    # Hash partitions are created by the migration; the ORM only needs
    # the logical table.
    __table_args__ = {"postgresql_partition_by": "HASH (key)"}

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    minute_window: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), primary_key=True
    )
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
