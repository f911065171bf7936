"""PgCounterStore statements and their order inside one transaction.

The statements are compiled against the PostgreSQL dialect, so these
tests pin the SQL that reaches the server without needing one.  The
live counterpart is test_pg_counter_repo_docker.py.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from sqlalchemy.dialects import postgresql

from hits.repos.pg_counter_repo import (
    PgCounterStore,
    key_lock_stmt,
    total_stmt,
    upsert_stmt,
)

WINDOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def _params(stmt) -> dict:
    return stmt.compile(dialect=postgresql.dialect()).params


def test_key_lock_is_transaction_scoped_advisory_lock_on_key_hash() -> None:
    stmt = key_lock_stmt("octo/repo")
    sql = _sql(stmt)
    assert "pg_advisory_xact_lock(hashtext(" in sql
    # Session-level locks would outlive the transaction.
    assert "pg_advisory_lock(" not in sql
    assert "octo/repo" in _params(stmt).values()


def test_upsert_increments_existing_window_row() -> None:
    stmt = upsert_stmt("octo/repo", WINDOW)
    sql = _sql(stmt)
    assert sql.startswith("INSERT INTO counters (key, minute_window, count)")
    assert "ON CONFLICT (key, minute_window) DO UPDATE SET count = " in sql
    assert "counters.count + " in sql
    params = _params(stmt)
    assert params["key"] == "octo/repo"
    assert params["minute_window"] == WINDOW
    assert params["count"] == 1


def test_total_sums_every_window_of_the_key() -> None:
    stmt = total_stmt("octo/repo")
    sql = _sql(stmt)
    assert "coalesce(sum(counters.count)" in sql
    assert "WHERE counters.key = " in sql
    assert "minute_window" not in sql
    assert "octo/repo" in _params(stmt).values()


class _Result:
    def __init__(self, value: int | None) -> None:
        self._value = value

    def scalar_one(self) -> int | None:
        return self._value


class _FakeSession:
    """Records executed statements; the SUM returns ``total``."""

    def __init__(self, total: int) -> None:
        self.total = total
        self.executed: list = []
        self.began = 0
        self.closed = False

    async def __aenter__(self) -> _FakeSession:
        return self

    async def __aexit__(self, *exc) -> None:
        self.closed = True

    def begin(self) -> _FakeTransaction:
        self.began += 1
        return _FakeTransaction()

    async def execute(self, stmt) -> _Result:
        self.executed.append(stmt)
        return _Result(self.total)


class _FakeTransaction:
    async def __aenter__(self) -> None:
        return None

    async def __aexit__(self, *exc) -> None:
        return None


def test_increment_locks_key_before_reading_clock_and_writing() -> None:
    session = _FakeSession(total=42)
    events: list[str] = []

    def clock() -> datetime:
        events.append(f"clock after {len(session.executed)} statements")
        return datetime(2026, 3, 1, 12, 0, 59, tzinfo=UTC)

    store = PgCounterStore(session_factory=lambda: session, clock=clock)  # type: ignore[arg-type]

    assert asyncio.run(store.increment_and_total("octo/repo")) == 42

    lock, upsert, total = (_sql(s) for s in session.executed)
    assert "pg_advisory_xact_lock" in lock
    assert upsert.startswith("INSERT INTO counters")
    assert "sum(counters.count)" in total
    assert events == ["clock after 1 statements"]
    assert _params(session.executed[1])["minute_window"] == WINDOW
    assert session.began == 1
    assert session.closed


def test_increment_returns_int_total() -> None:
    session = _FakeSession(total=7)
    store = PgCounterStore(session_factory=lambda: session)  # type: ignore[arg-type]

    total = asyncio.run(store.increment_and_total("k"))

    assert total == 7
    assert type(total) is int
