from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta, timezone

from hits.repos.counter_repo import CounterStore, InMemoryCounterStore, minute_window
from hits.repos.pg_counter_repo import PgCounterStore
from hits.repos.redis_counter_repo import RedisCounterStore


class _Clock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now


def test_minute_window_truncates_to_utc_minute() -> None:
    moment = datetime(2026, 3, 1, 12, 34, 56, 789, tzinfo=timezone(timedelta(hours=2)))
    assert minute_window(moment) == datetime(2026, 3, 1, 10, 34, tzinfo=UTC)


def test_all_stores_satisfy_protocol() -> None:
    assert isinstance(InMemoryCounterStore(), CounterStore)
    assert isinstance(PgCounterStore(session_factory=None), CounterStore)  # type: ignore[arg-type]
    assert isinstance(RedisCounterStore(redis_client=None), CounterStore)


def test_in_memory_total_spans_windows() -> None:
    clock = _Clock(datetime(2026, 3, 1, 12, 0, 5, tzinfo=UTC))
    store = InMemoryCounterStore(clock=clock)

    async def run() -> list[int]:
        totals = [await store.increment_and_total("k"), await store.increment_and_total("k")]
        clock.now += timedelta(minutes=1)
        totals.append(await store.increment_and_total("k"))
        return totals

    assert asyncio.run(run()) == [1, 2, 3]
    assert store.windows("k") == {
        datetime(2026, 3, 1, 12, 0, tzinfo=UTC): 2,
        datetime(2026, 3, 1, 12, 1, tzinfo=UTC): 1,
    }


def test_in_memory_keys_are_independent() -> None:
    store = InMemoryCounterStore()

    async def run() -> tuple[int, int]:
        await store.increment_and_total("a")
        await store.increment_and_total("a")
        return await store.increment_and_total("a"), await store.increment_and_total("b")

    assert asyncio.run(run()) == (3, 1)
