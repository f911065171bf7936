"""Live hit feed over WebSocket.

Every time any counter is bumped, each connected client receives the
key as a text frame.  Counts are not sent; a dashboard that wants the
number fetches it separately (or just shows activity).

A client that reads too slowly falls behind the broadcaster's ring
buffer.  It then skips ahead to the oldest retained key and keeps going;
the skip is logged, the connection stays open.  Frames sent by the
client are ignored.
"""

from __future__ import annotations

import logging
from typing import Annotated

import anyio
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from hits.api.dependencies import get_broadcaster
from hits.services.fanout import Broadcaster, ChannelClosed, SubscriberLagged, Subscription

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])

# 1001: the server is going away (shutdown closed the broadcaster).
_GOING_AWAY = 1001


async def _forward_keys(websocket: WebSocket, subscription: Subscription) -> bool:
    """Send bumped keys until the channel closes or the client leaves.

    Returns True when the channel closed, False when the client went away.
    """
    while True:
        try:
            key = await subscription.recv()
        except SubscriberLagged as exc:
            logger.warning("WebSocket subscriber lagged, skipped %d keys", exc.skipped)
            continue
        except ChannelClosed:
            return True
        try:
            await websocket.send_text(key)
        except WebSocketDisconnect:
            return False


async def _ignore_client_frames(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
        logger.debug("Ignoring client frame on /ws")


@router.websocket("/ws")
async def live_hits(
    websocket: WebSocket,
    broadcaster: Annotated[Broadcaster, Depends(get_broadcaster)],
) -> None:
    # Subscribe before accepting: once the client sees the handshake
    # complete, every later bump is guaranteed to reach it.
    subscription = broadcaster.subscribe()
    try:
        await websocket.accept()
        logger.info(
            "WebSocket subscriber connected (%d live)", broadcaster.subscriber_count
        )

        channel_closed = False
        # Whichever side finishes first ends the session for both.
        async with anyio.create_task_group() as tg:

            async def send() -> None:
                nonlocal channel_closed
                channel_closed = await _forward_keys(websocket, subscription)
                tg.cancel_scope.cancel()

            async def receive() -> None:
                await _ignore_client_frames(websocket)
                tg.cancel_scope.cancel()

            tg.start_soon(send)
            tg.start_soon(receive)

        if channel_closed and websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close(code=_GOING_AWAY)
    finally:
        subscription.close()
        logger.info(
            "WebSocket subscriber disconnected (%d live)", broadcaster.subscriber_count
        )
