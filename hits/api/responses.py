"""Shared response pieces: cache suppression and error bodies.

Every badge response changes on every request (the count goes up), so
no client, CDN or image proxy may cache it.  GitHub's camo proxy in
particular honours these headers; without them a README badge freezes at
whatever count it first fetched.  Error responses carry the same headers
so a transient store failure is not cached as the badge either.
"""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from hits.services.counter import CounterUnavailableError

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

STORE_ERROR_MESSAGE = "An unexpected database error occurred."


class ApiError(BaseModel):
    message: str


async def counter_unavailable_handler(
    request: Request, exc: CounterUnavailableError
) -> JSONResponse:
    # The store failure itself was logged with full detail by the
    # coordinator; the client only learns that it failed.
    logger.error("Counter unavailable for %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ApiError(message=STORE_ERROR_MESSAGE).model_dump(),
        headers=NO_CACHE_HEADERS,
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """FastAPI's 422 body, plus the no-cache headers."""
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
        headers=NO_CACHE_HEADERS,
    )
