"""Startup wiring: build every long-lived object once and hand it out.

Nothing in the badge engine or the coordinator reaches for module-level
state; the lifespan hook in main.py calls ``build_services()`` and
stores the result on ``app.state``, and routes get it through
dependencies.  Tests build their own with an in-memory store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hits.badge.fonts import load_typefaces
from hits.badge.text_width import TextWidthResolver
from hits.core.config import Settings
from hits.db import engine as db_engine
from hits.db import redis as db_redis
from hits.repos.counter_repo import CounterStore, InMemoryCounterStore
from hits.repos.pg_counter_repo import PgCounterStore
from hits.repos.redis_counter_repo import RedisCounterStore
from hits.services.counter import CounterCoordinator
from hits.services.fanout import Broadcaster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    resolver: TextWidthResolver
    broadcaster: Broadcaster
    coordinator: CounterCoordinator


def select_store() -> CounterStore:
    """Postgres when configured, else Redis, else in-memory."""
    if db_engine.async_session_factory is not None:
        return PgCounterStore(db_engine.async_session_factory)
    if db_redis.redis_pool is not None:
        return RedisCounterStore(db_redis.redis_pool)
    return InMemoryCounterStore()


def build_services(settings: Settings, store: CounterStore | None = None) -> Services:
    """Load fonts and assemble the coordinator.

    Raises:
        FontConfigError: font data is unusable; startup must abort.
    """
    resolver = TextWidthResolver(load_typefaces(settings))
    broadcaster = Broadcaster(capacity=settings.fanout_capacity)
    store = store if store is not None else select_store()
    logger.info(
        "Counter store: %s  fan-out capacity: %d  typefaces: %s",
        store.backend,
        broadcaster.capacity,
        ", ".join(f"{t.name}={t.source}" for t in resolver.registry.values()),
    )
    return Services(
        resolver=resolver,
        broadcaster=broadcaster,
        coordinator=CounterCoordinator(store, broadcaster),
    )
