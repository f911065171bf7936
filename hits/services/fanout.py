"""In-process broadcast channel for hit notifications.

Every successful bump publishes its key; every connected WebSocket
session holds a Subscription and forwards what it receives.

DESIGN: ONE RING, MANY CURSORS
-------------------------------
The broadcaster keeps a single bounded ring of ``(sequence, key)``
pairs.  A subscription is just a cursor (the next sequence number it
wants) plus an asyncio.Event used to wake it.  Consequences:

  - publish() is O(subscribers) event-sets and never awaits, so a slow
    or stuck WebSocket can never slow down a badge request.
  - Memory is bounded by the ring capacity, not by the slowest reader.
  - A subscriber whose cursor falls off the tail of the ring has lost
    messages.  Instead of silently skipping them, recv() raises
    SubscriberLagged with the number dropped and moves the cursor to the
    oldest message still held.

A subscription starts at the next sequence number at the time it was
created, so it never sees messages published before it subscribed.

Everything runs on one event loop; there is no await between reading
and advancing a cursor, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator

from hits.core.metrics import FANOUT_LAGGED, FANOUT_SUBSCRIBERS

logger = logging.getLogger(__name__)


class SubscriberLagged(Exception):
    """The subscriber fell behind the ring buffer and ``skipped`` messages were dropped."""

    def __init__(self, skipped: int) -> None:
        super().__init__(f"subscriber lagged behind by {skipped} messages")
        self.skipped = skipped


class ChannelClosed(Exception):
    """The broadcaster was closed and every buffered message was consumed."""


class Broadcaster:
    def __init__(self, capacity: int = 100) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive (got {capacity})")
        self._capacity = capacity
        self._ring: deque[tuple[int, str]] = deque(maxlen=capacity)
        self._next_seq = 0
        self._subscribers: set[Subscription] = set()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, key: str) -> int:
        """Append ``key`` to the ring and wake every subscriber.

        Returns the number of subscribers notified; zero is not an error.
        Publishing on a closed broadcaster is a no-op.
        """
        if self._closed:
            return 0
        self._ring.append((self._next_seq, key))
        self._next_seq += 1
        for subscription in self._subscribers:
            subscription._wake()
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, start=self._next_seq)
        self._subscribers.add(subscription)
        FANOUT_SUBSCRIBERS.inc()
        return subscription

    def close(self) -> None:
        """Stop accepting messages; subscribers drain the ring, then get ChannelClosed."""
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscribers:
            subscription._wake()
        logger.info("Broadcaster closed (%d subscribers)", len(self._subscribers))

    def _detach(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.discard(subscription)
            FANOUT_SUBSCRIBERS.dec()

    def _oldest_seq(self) -> int:
        return self._ring[0][0] if self._ring else self._next_seq


class Subscription:
    """A reader's cursor into a Broadcaster.

    Use ``await recv()`` or ``async for key in subscription``; call
    ``close()`` (or use it as a context manager) to detach.
    """

    def __init__(self, broadcaster: Broadcaster, start: int) -> None:
        self._broadcaster = broadcaster
        self._next = start
        self._event = asyncio.Event()
        self._closed = False

    def _wake(self) -> None:
        self._event.set()

    @property
    def pending(self) -> int:
        """Messages published since this subscription last read (including dropped ones)."""
        return self._broadcaster._next_seq - self._next

    async def recv(self) -> str:
        broadcaster = self._broadcaster
        while True:
            if self._closed:
                raise ChannelClosed()

            oldest = broadcaster._oldest_seq()
            if self._next < oldest:
                skipped = oldest - self._next
                self._next = oldest
                FANOUT_LAGGED.inc(skipped)
                raise SubscriberLagged(skipped)

            if self._next < broadcaster._next_seq:
                seq, key = broadcaster._ring[self._next - oldest]
                self._next = seq + 1
                return key

            if broadcaster.closed:
                raise ChannelClosed()

            self._event.clear()
            await self._event.wait()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._broadcaster._detach(self)
        self._event.set()

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        try:
            return await self.recv()
        except ChannelClosed:
            raise StopAsyncIteration from None

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
