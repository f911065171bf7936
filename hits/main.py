from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from hits.api.badges import router as badges_router
from hits.api.health import router as health_router
from hits.api.hits import PROJECT_NAME, VERSION
from hits.api.hits import router as hits_router
from hits.api.metrics_endpoint import router as metrics_router
from hits.api.responses import counter_unavailable_handler, validation_error_handler
from hits.api.ws import router as ws_router
from hits.core.config import SETTINGS
from hits.core.logging import setup_logging
from hits.db.engine import lifespan_db
from hits.db.redis import lifespan_redis
from hits.middleware.metrics import MetricsMiddleware
from hits.middleware.request_context import RequestContextMiddleware
from hits.services.counter import CounterUnavailableError
from hits.services.wiring import build_services

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Backing services come up first and go down last.  A FontConfigError
    # from build_services() propagates and aborts startup.
    async with lifespan_db():
        async with lifespan_redis():
            services = build_services(SETTINGS)
            app.state.services = services
            try:
                yield
            finally:
                # Ends every open /ws session before the pools close.
                services.broadcaster.close()


app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Badges are embedded anywhere; the JSON endpoints are read cross-origin
# by dashboards.  Nothing here uses cookies.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(CounterUnavailableError, counter_unavailable_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(hits_router)
app.include_router(badges_router)
app.include_router(ws_router)

logger.info(
    "hits started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)


def run() -> None:
    """Console entry point: serve on HOST:PORT."""
    uvicorn.run(app, host=SETTINGS.host, port=SETTINGS.port, log_config=None)
