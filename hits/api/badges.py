"""Badge endpoints.

Two ways to show a counter in a README:

  /badge/{key}   shields.io "endpoint" JSON.  shields.io fetches it and
                 draws the badge itself, so only the count matters here.

  /svg/{key}     a finished SVG drawn by this service.  Style, label and
                 colors come from the query string.

Both count the hit before responding and both disable caching.  An
unknown ``style`` is a 422 from FastAPI's enum validation; the counter
is not bumped for a request that fails validation.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field

from hits.api.dependencies import get_coordinator, get_resolver
from hits.api.hits import CounterKey
from hits.api.responses import NO_CACHE_HEADERS, ApiError
from hits.badge.render import (
    DEFAULT_LABEL,
    DEFAULT_LABEL_COLOR,
    DEFAULT_MESSAGE_COLOR,
    SVG_CONTENT_TYPE,
    BadgeRequest,
    BadgeStyle,
    render_badge,
)
from hits.badge.text_width import TextWidthResolver
from hits.core.metrics import BADGE_RENDERS
from hits.services.counter import CounterCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["badges"],
    responses={500: {"model": ApiError, "description": "Counter store unavailable"}},
)


class ShieldsEndpointBadge(BaseModel):
    """https://shields.io/badges/endpoint-badge"""

    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(default=1, alias="schemaVersion")
    label: str = "hits"
    message: str
    color: str = "blue"


@router.get("/badge/{key}", response_model=ShieldsEndpointBadge)
async def shields_badge(
    key: CounterKey,
    response: Response,
    coordinator: Annotated[CounterCoordinator, Depends(get_coordinator)],
) -> ShieldsEndpointBadge:
    total = await coordinator.bump(key)
    response.headers.update(NO_CACHE_HEADERS)
    return ShieldsEndpointBadge(message=str(total))


@router.get(
    "/svg/{key}",
    response_class=Response,
    responses={200: {"content": {"image/svg+xml": {}}}},
)
async def svg_badge(
    key: CounterKey,
    coordinator: Annotated[CounterCoordinator, Depends(get_coordinator)],
    resolver: Annotated[TextWidthResolver, Depends(get_resolver)],
    style: BadgeStyle = BadgeStyle.FLAT,
    label: str = DEFAULT_LABEL,
    label_color: str = DEFAULT_LABEL_COLOR,
    message_color: str = DEFAULT_MESSAGE_COLOR,
    link: str | None = None,
    extra_link: str | None = None,
    logo: str | None = None,
    logo_color: str | None = None,
) -> Response:
    total = await coordinator.bump(key)
    badge = render_badge(
        BadgeRequest(
            message=str(total),
            label=label,
            style=style,
            label_color=label_color,
            message_color=message_color,
            link=link,
            extra_link=extra_link,
            logo=logo,
            logo_color=logo_color,
        ),
        resolver,
    )
    BADGE_RENDERS.labels(style=style.value).inc()
    logger.debug(
        "Rendered %s badge for key=%s",
        style.value,
        key,
        extra={"key": key, "style": style.value},
    )
    return Response(
        content=badge.body,
        media_type=SVG_CONTENT_TYPE,
        headers=NO_CACHE_HEADERS,
    )
