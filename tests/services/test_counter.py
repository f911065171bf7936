from __future__ import annotations

import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from hits.repos.counter_repo import InMemoryCounterStore
from hits.services.counter import CounterCoordinator, CounterUnavailableError
from hits.services.fanout import Broadcaster


class _FailingStore:
    backend = "memory"

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def increment_and_total(self, key: str) -> int:
        raise self._exc


def _coordinator(store=None) -> tuple[CounterCoordinator, Broadcaster]:
    broadcaster = Broadcaster(capacity=100)
    return CounterCoordinator(store or InMemoryCounterStore(), broadcaster), broadcaster


def test_bump_returns_running_total() -> None:
    coordinator, _ = _coordinator()

    async def run() -> list[int]:
        return [await coordinator.bump("k") for _ in range(3)]

    assert asyncio.run(run()) == [1, 2, 3]


def test_concurrent_bumps_get_distinct_totals() -> None:
    coordinator, _ = _coordinator()
    n = 200

    async def run() -> list[int]:
        return await asyncio.gather(*(coordinator.bump("hot") for _ in range(n)))

    totals = asyncio.run(run())
    assert sorted(totals) == list(range(1, n + 1))


def test_bump_publishes_key_after_increment() -> None:
    coordinator, broadcaster = _coordinator()

    async def run() -> list[str]:
        subscription = broadcaster.subscribe()
        await coordinator.bump("a")
        await coordinator.bump("b")
        return [await subscription.recv(), await subscription.recv()]

    assert asyncio.run(run()) == ["a", "b"]


def test_bump_without_subscribers_is_fine() -> None:
    coordinator, _ = _coordinator()
    assert asyncio.run(coordinator.bump("lonely")) == 1


@pytest.mark.parametrize(
    "exc",
    [
        ConnectionRefusedError("refused"),
        RedisConnectionError("redis gone"),
        OperationalError("SELECT 1", {}, Exception("db gone")),
    ],
)
def test_store_errors_become_unavailable(exc: Exception) -> None:
    coordinator, broadcaster = _coordinator(_FailingStore(exc))

    async def run() -> int:
        subscription = broadcaster.subscribe()
        with pytest.raises(CounterUnavailableError) as info:
            await coordinator.bump("k")
        # No detail leaks, and nothing was published.
        assert str(info.value) == "counter store temporarily unavailable"
        assert info.value.__cause__ is None
        return subscription.pending

    assert asyncio.run(run()) == 0


def test_programming_errors_propagate() -> None:
    coordinator, _ = _coordinator(_FailingStore(KeyError("bug")))
    with pytest.raises(KeyError):
        asyncio.run(coordinator.bump("k"))
