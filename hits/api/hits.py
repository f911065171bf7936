"""Service info and the plain counter endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request
from pydantic import BaseModel

from hits.api.dependencies import get_coordinator
from hits.api.responses import ApiError
from hits.services.counter import CounterCoordinator

PROJECT_NAME = "hits"
VERSION = "0.1.0"

router = APIRouter(tags=["hits"])

_STORE_ERROR_RESPONSE = {500: {"model": ApiError, "description": "Counter store unavailable"}}

# Keys are opaque; anything that survives URL path decoding is a key.
CounterKey = Annotated[str, Path(min_length=1, description="Counter key, e.g. a repo slug")]


class AppInfo(BaseModel):
    project_name: str
    version: str
    docs_path: str | None


@router.get("/", response_model=AppInfo)
async def app_info(request: Request) -> AppInfo:
    return AppInfo(
        project_name=PROJECT_NAME,
        version=VERSION,
        docs_path=request.app.docs_url,
    )


@router.get("/hits/{key}", response_model=int, responses=_STORE_ERROR_RESPONSE)
async def count_hit(
    key: CounterKey,
    coordinator: Annotated[CounterCoordinator, Depends(get_coordinator)],
) -> int:
    """Count one hit for ``key`` and return the running total."""
    return await coordinator.bump(key)
