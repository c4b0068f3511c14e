"""Prometheus metrics for PIX generation, provider health and store status"""

from prometheus_client import Counter, Histogram

# PIX metrics
pix_generated_counter = Counter(
    "pizzeria_pix_generated_total",
    "PIX codes generated",
    ["provider"],  # efipay | static | static_fallback
)

provider_failure_counter = Counter(
    "pizzeria_pix_provider_failures_total",
    "Payment provider failures that triggered the static fallback",
    ["stage"],  # auth | charge | qrcode | unknown
)

provider_latency_histogram = Histogram(
    "pizzeria_pix_provider_latency_seconds",
    "Time spent on a full dynamic charge (auth + charge + QR)",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Store status
store_status_counter = Counter(
    "pizzeria_store_status_checks_total",
    "Store status evaluations",
    ["outcome"],  # open | closed
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_pix_generated(provider: str) -> None:
    pix_generated_counter.labels(provider=provider).inc()


def record_provider_failure(stage: str) -> None:
    provider_failure_counter.labels(stage=stage).inc()


def record_store_status(accepting_orders: bool) -> None:
    store_status_counter.labels(outcome="open" if accepting_orders else "closed").inc()
