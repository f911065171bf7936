"""Health and readiness endpoints.

  /health (liveness):
    "Is this process alive?"  Always 200 while the process can answer;
    the ``status`` field says whether a backing service is impaired.
    A 503 here would make an orchestrator restart the container, which
    does nothing for a database outage.

  /ready (readiness):
    "Can this instance count hits right now?"  503 while startup has not
    finished or while the configured counter store is unreachable, so
    the load balancer stops routing here until it recovers.  The
    in-memory store is always ready.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hits.db import engine as db_engine
from hits.db import redis as db_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_database() -> str:
    if db_engine.engine is None:
        return "not_configured"
    try:
        async with db_engine.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.warning("Database health check failed", exc_info=True)
        return "degraded"
    return "ok"


async def _check_redis() -> str:
    if db_redis.redis_pool is None:
        return "not_configured"
    try:
        await db_redis.redis_pool.ping()  # type: ignore[misc]
    except (RedisError, OSError):
        logger.warning("Redis health check failed", exc_info=True)
        return "degraded"
    return "ok"


async def _dependency_checks() -> dict[str, str]:
    return {
        "database": await _check_database(),
        "redis": await _check_redis(),
    }


def _store_backend(request: Request) -> str | None:
    services = getattr(request.app.state, "services", None)
    return services.coordinator.store.backend if services is not None else None


@router.get("/health")
async def health(request: Request) -> dict:
    checks = await _dependency_checks()
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {
        "status": overall,
        "store": _store_backend(request),
        "checks": checks,
    }


@router.get("/ready")
async def ready(request: Request) -> Response:
    backend = _store_backend(request)
    if backend is None:
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    # Only the store actually serving counts decides readiness.
    checks = await _dependency_checks()
    critical = {"postgres": "database", "redis": "redis"}.get(backend)
    if critical is not None and checks[critical] != "ok":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
