"""Redis implementation of CounterStore.

WHY A LUA SCRIPT
-----------------
A bump touches two keys: the per-minute window hash and the running
total.  Issued as separate commands, a crash between them would leave
the total and the windows disagreeing, and two concurrent bumps could
interleave their reads.  Redis runs a Lua script atomically, so the
window increment and the total increment land together and every bump
sees a distinct total.

KEY LAYOUT
-----------
  hits:windows:{key}   hash, field = minute window (ISO-8601), value = count
  hits:total:{key}     integer, sum of all window counts
"""

from __future__ import annotations

from hits.repos.counter_repo import Clock, minute_window, utc_now


class RedisCounterStore:
    """Satisfies the CounterStore Protocol using a Redis Lua script."""

    backend = "redis"

    # KEYS[1] = windows hash, KEYS[2] = total key, ARGV[1] = window field
    _LUA_SCRIPT = """
    redis.call('HINCRBY', KEYS[1], ARGV[1], 1)
    return redis.call('INCR', KEYS[2])
    """

    _WINDOWS_PREFIX = "hits:windows:"
    _TOTAL_PREFIX = "hits:total:"

    def __init__(self, redis_client, clock: Clock = utc_now) -> None:
        self._redis = redis_client
        self._clock = clock
        self._script = None

    def _get_script(self):
        if self._script is None:
            self._script = self._redis.register_script(self._LUA_SCRIPT)
        return self._script

    async def increment_and_total(self, key: str) -> int:
        window = minute_window(self._clock()).isoformat()
        script = self._get_script()
        total = await script(
            keys=[f"{self._WINDOWS_PREFIX}{key}", f"{self._TOTAL_PREFIX}{key}"],
            args=[window],
        )
        return int(total)
