from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def minute_window(moment: datetime) -> datetime:
    """Truncate to the containing UTC minute."""
    return moment.astimezone(UTC).replace(second=0, microsecond=0)


@runtime_checkable
class CounterStore(Protocol):
    backend: str

    async def increment_and_total(self, key: str) -> int:
        """Add one hit to ``key``'s current minute window and return the
        key's total across all windows, including this hit.

        Must be atomic with respect to concurrent calls for the same key.
        """
        ...


class InMemoryCounterStore:
    """Dict-backed store for tests and local runs without Postgres/Redis.

    The read-modify-write below has no await in it, so on a single event
    loop no other bump can interleave and the total is exact.  Per-process
    only: two API instances would each count their own hits.
    """

    backend = "memory"

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._windows: dict[tuple[str, datetime], int] = {}
        self._totals: dict[str, int] = {}

    async def increment_and_total(self, key: str) -> int:
        window = (key, minute_window(self._clock()))
        self._windows[window] = self._windows.get(window, 0) + 1
        total = self._totals.get(key, 0) + 1
        self._totals[key] = total
        return total

    def windows(self, key: str) -> dict[datetime, int]:
        """Per-minute counts for ``key`` (inspection helper for tests)."""
        return {w: c for (k, w), c in self._windows.items() if k == key}
