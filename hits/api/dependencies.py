from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from hits.badge.text_width import TextWidthResolver
from hits.services.counter import CounterCoordinator
from hits.services.fanout import Broadcaster
from hits.services.wiring import Services


def get_services(connection: HTTPConnection) -> Services:
    """The Services built by the lifespan hook (works for HTTP and WebSocket)."""
    return connection.app.state.services


def get_coordinator(
    services: Annotated[Services, Depends(get_services)],
) -> CounterCoordinator:
    return services.coordinator


def get_resolver(
    services: Annotated[Services, Depends(get_services)],
) -> TextWidthResolver:
    return services.resolver


def get_broadcaster(
    services: Annotated[Services, Depends(get_services)],
) -> Broadcaster:
    return services.broadcaster
