"""Prometheus metrics for the course progress service.

Every metric the service exposes is declared here so there is one
inventory to read when building dashboards.  Modules import the metric
they own and increment it at the point of action.

HTTP metrics are filled in by MetricsMiddleware.  Domain metrics answer
the questions the learning team actually asks:

  - How many toggles change state vs. are retried no-ops?
    completion_toggles_total{result="changed"|"noop"}
  - How many enrollments reach COMPLETED, and how many certificates came
    from the completion edge vs. the lazy self-heal on read?
    enrollments_completed_total, certificates_issued_total{trigger}
  - Is anything violating the progress/certificate invariants?
    invariant_breaches_total{kind}: should stay at 0; alert on any increase.
  - How often do concurrent toggles lose a storage race?
    conflict_retries_total
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
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Progress / certificate metrics
# ---------------------------------------------------------------------------

COMPLETION_TOGGLES = Counter(
    "completion_toggles_total",
    "Completion toggle requests by outcome",
    ["result"],  # "changed" or "noop"
)

ENROLLMENTS_COMPLETED = Counter(
    "enrollments_completed_total",
    "Enrollment transitions from IN_PROGRESS to COMPLETED",
)

CERTIFICATES_ISSUED = Counter(
    "certificates_issued_total",
    "Certificates created",
    ["trigger"],  # "completion" or "self_heal"
)

INVARIANT_BREACHES = Counter(
    "invariant_breaches_total",
    "Progress/certificate invariant violations detected at runtime",
    ["kind"],
)

CONFLICT_RETRIES = Counter(
    "conflict_retries_total",
    "Toggle operations retried after losing a storage race",
)

# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # "hit" or "miss"
)
