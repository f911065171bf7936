"""RedisCounterStore against a stand-in client.

The stand-in executes the same two commands the Lua script issues, so
these tests pin the key layout and argument passing, not Redis itself.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from hits.repos.redis_counter_repo import RedisCounterStore


class _FakeScript:
    def __init__(self, client: _FakeRedis) -> None:
        self._client = client

    async def __call__(self, keys: list[str], args: list[str]) -> int:
        windows_key, total_key = keys
        (window,) = args
        bucket = self._client.hashes.setdefault(windows_key, {})
        bucket[window] = bucket.get(window, 0) + 1
        self._client.values[total_key] = self._client.values.get(total_key, 0) + 1
        return self._client.values[total_key]


class _FakeRedis:
    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, int]] = {}
        self.values: dict[str, int] = {}
        self.registered: list[str] = []

    def register_script(self, source: str) -> _FakeScript:
        self.registered.append(source)
        return _FakeScript(self)


def test_increment_uses_window_hash_and_total_key() -> None:
    client = _FakeRedis()
    clock = lambda: datetime(2026, 3, 1, 9, 15, 42, tzinfo=UTC)  # noqa: E731
    store = RedisCounterStore(client, clock=clock)

    async def run() -> list[int]:
        return [await store.increment_and_total("repo") for _ in range(3)]

    assert asyncio.run(run()) == [1, 2, 3]
    assert client.values == {"hits:total:repo": 3}
    assert client.hashes == {"hits:windows:repo": {"2026-03-01T09:15:00+00:00": 3}}


def test_script_is_registered_once() -> None:
    client = _FakeRedis()
    store = RedisCounterStore(client)

    async def run() -> None:
        await store.increment_and_total("a")
        await store.increment_and_total("b")

    asyncio.run(run())
    assert len(client.registered) == 1
    assert "HINCRBY" in client.registered[0]
    assert "INCR" in client.registered[0]
