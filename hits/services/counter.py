"""Counter coordination: count the hit, then tell the subscribers.

ORDERING
---------
The store increment happens first and is never undone.  If the client
disconnects after the increment, the hit still counts and the key is
still published; a request that never got a response may still have
been counted, but a counted hit is never lost.

No in-process lock is taken.  Atomicity of increment-and-total is the
store's job (upsert under row lock, Lua script, or a loop-atomic dict),
so concurrent bumps of the same key run in parallel and are all counted.
"""

from __future__ import annotations

import logging

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from hits.core.metrics import COUNTER_STORE_ERRORS, HITS_INCREMENTS
from hits.repos.counter_repo import CounterStore
from hits.services.fanout import Broadcaster

logger = logging.getLogger(__name__)

# Errors a store backend can raise for a failed round-trip.  Anything
# else is a bug and propagates as-is.
_STORE_ERRORS = (SQLAlchemyError, RedisError, OSError)


class CounterUnavailableError(Exception):
    """The counter store could not complete an increment.

    Carries no store detail; the detail is logged where it is raised.
    """

    def __init__(self) -> None:
        super().__init__("counter store temporarily unavailable")


class CounterCoordinator:
    def __init__(self, store: CounterStore, broadcaster: Broadcaster) -> None:
        self._store = store
        self._broadcaster = broadcaster

    @property
    def store(self) -> CounterStore:
        return self._store

    async def bump(self, key: str) -> int:
        """Increment ``key`` and return its total including this hit.

        Raises:
            CounterUnavailableError: the store failed; details are logged.
        """
        try:
            total = await self._store.increment_and_total(key)
        except _STORE_ERRORS:
            COUNTER_STORE_ERRORS.labels(backend=self._store.backend).inc()
            logger.exception(
                "Counter store increment failed for key=%s",
                key,
                extra={"key": key},
            )
            raise CounterUnavailableError() from None

        HITS_INCREMENTS.inc()
        delivered = self._broadcaster.publish(key)
        logger.debug(
            "Bumped key=%s total=%d subscribers=%d",
            key,
            total,
            delivered,
            extra={"key": key},
        )
        return total
