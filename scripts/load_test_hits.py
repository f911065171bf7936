#!/usr/bin/env python3
"""Concurrent load test for one counter key.

RUN:  python scripts/load_test_hits.py [base_url] [requests] [concurrency]

Fires REQUESTS bumps at /hits/{key} with CONCURRENCY in flight at once
and checks that every response carried a distinct total and that the
totals form one unbroken run.  A duplicate or a gap means the store's
increment-and-total is not atomic.

Prerequisites:
  - The service must be running: hits (or uvicorn hits.main:app --port 3030)
"""

from __future__ import annotations

import asyncio
import sys
import time
import uuid

import httpx

BASE_URL = "http://localhost:3030"
TOTAL_REQUESTS = 500
CONCURRENCY = 50


async def _bump(client: httpx.AsyncClient, key: str, gate: asyncio.Semaphore) -> int | None:
    async with gate:
        resp = await client.get(f"/hits/{key}")
    return resp.json() if resp.status_code == 200 else None


async def run(base_url: str, total: int, concurrency: int) -> int:
    key = f"load-test-{uuid.uuid4().hex[:8]}"
    print("Hit Counter Load Test")
    print("=" * 50)
    print(f"Target: {base_url}/hits/{key}")
    print(f"Requests: {total}  concurrency: {concurrency}")
    print()

    gate = asyncio.Semaphore(concurrency)
    limits = httpx.Limits(max_connections=concurrency)
    start = time.monotonic()
    async with httpx.AsyncClient(base_url=base_url, timeout=10, limits=limits) as client:
        results = await asyncio.gather(*(_bump(client, key, gate) for _ in range(total)))
    elapsed = time.monotonic() - start

    totals = [r for r in results if r is not None]
    failed = total - len(totals)
    duplicates = len(totals) - len(set(totals))
    expected = set(range(1, len(totals) + 1))

    print(f"Results after {total} requests ({elapsed:.2f}s, {total / elapsed:.0f} req/s):")
    print("-" * 40)
    print(f"  OK:         {len(totals):>5}")
    print(f"  Failed:     {failed:>5}")
    print(f"  Duplicates: {duplicates:>5}")
    print()

    if failed == 0 and set(totals) == expected:
        print(f"Every hit got a distinct total, 1..{total}.")
        return 0
    print("FAILED: totals are not an unbroken run; the store lost or repeated hits.")
    return 1


def main() -> None:
    base_url = sys.argv[1] if len(sys.argv) > 1 else BASE_URL
    total = int(sys.argv[2]) if len(sys.argv) > 2 else TOTAL_REQUESTS
    concurrency = int(sys.argv[3]) if len(sys.argv) > 3 else CONCURRENCY
    sys.exit(asyncio.run(run(base_url, total, concurrency)))


if __name__ == "__main__":
    main()
