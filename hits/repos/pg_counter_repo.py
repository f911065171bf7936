"""PostgreSQL implementation of CounterStore."""

from __future__ import annotations

from sqlalchemy import Select, func, select
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hits.db.tables import CounterRow
from hits.repos.counter_repo import Clock, minute_window, utc_now


def key_lock_stmt(key: str) -> Select:
    """Transaction-scoped advisory lock on ``key``, released at commit."""
    return select(func.pg_advisory_xact_lock(func.hashtext(key)))


def upsert_stmt(key: str, window) -> Insert:
    stmt = insert(CounterRow).values(key=key, minute_window=window, count=1)
    return stmt.on_conflict_do_update(
        index_elements=[CounterRow.key, CounterRow.minute_window],
        set_={"count": CounterRow.count + 1},
    )


def total_stmt(key: str) -> Select:
    return select(func.coalesce(func.sum(CounterRow.count), 0)).where(
        CounterRow.key == key
    )


class PgCounterStore:
    """Satisfies the CounterStore Protocol using PostgreSQL via SQLAlchemy.

    Each bump is one transaction of three statements:

      1. ``pg_advisory_xact_lock(hashtext(key))``: bumps of the same key
         queue here until the holder commits, whichever minute window
         they write.  The window row's lock alone is not enough: two
         bumps on either side of a minute boundary insert different rows,
         never wait on each other, and would both sum to the same total.
      2. the upsert of the ``(key, minute_window)`` row.
      3. ``SUM(count)`` over the key.  Under READ COMMITTED this statement
         takes a fresh snapshot, so it sees this transaction's upsert and
         every bump that committed before the lock was granted.

    Two bumps of one key therefore never observe the same total.  A hash
    collision between two keys only makes them queue behind each other.
    """

    backend = "postgres"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def increment_and_total(self, key: str) -> int:
        async with self._session_factory() as session, session.begin():
            await session.execute(key_lock_stmt(key))
            # Read the clock after the lock: a bump that waited lands in
            # the window it was actually counted in.
            await session.execute(upsert_stmt(key, minute_window(self._clock())))
            total = (await session.execute(total_stmt(key))).scalar_one()
        return int(total)
