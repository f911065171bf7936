"""Application metrics using the Prometheus client library.

One inventory of everything the service measures.  Other modules import
the metric they own and increment/observe it at the point of action;
Prometheus scrapes the totals from GET /metrics.

Counters only go up and are read as rates (``rate(hits_increments_total[5m])``
is "hits per second").  Gauges are snapshots (live WebSocket subscribers).
Histograms bucket observations so Prometheus can compute percentiles.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # A badge request is one store round-trip plus a few microseconds of
    # layout; anything past 250ms means the store is struggling.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Counter / badge / fan-out metrics
# ---------------------------------------------------------------------------

HITS_INCREMENTS = Counter(
    "hits_increments_total",
    "Successful counter increments across all keys",
)

COUNTER_STORE_ERRORS = Counter(
    "counter_store_errors_total",
    "Counter store failures surfaced as 'temporarily unavailable'",
    ["backend"],  # "postgres", "redis" or "memory"
)

BADGE_RENDERS = Counter(
    "badge_renders_total",
    "SVG badges rendered, by style",
    ["style"],
)

FANOUT_SUBSCRIBERS = Gauge(
    "fanout_subscribers",
    "Live notification subscribers (WebSocket sessions)",
)

FANOUT_LAGGED = Counter(
    "fanout_lagged_total",
    "Notifications dropped because a subscriber fell behind the buffer",
)
