from __future__ import annotations

from typing import Any

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

from supplier_api.core.config import settings

REGISTRY = CollectorRegistry(auto_describe=True)

REQUEST_LATENCY = Histogram(
    f"{settings.METRICS_NAMESPACE}_http_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "path", "status_code"],
    buckets=settings.METRICS_LATENCY_BUCKETS,
    registry=REGISTRY,
)

REQUEST_COUNT = Counter(
    f"{settings.METRICS_NAMESPACE}_http_requests_total",
    "Total HTTP requests processed.",
    ["method", "path", "status_code"],
    registry=REGISTRY,
)

REQUEST_ERRORS = Counter(
    f"{settings.METRICS_NAMESPACE}_http_errors_total",
    "Total HTTP requests resulting in 4xx/5xx.",
    ["method", "path", "status_code"],
    registry=REGISTRY,
)

LOGIN_ATTEMPTS = Counter(
    f"{settings.METRICS_NAMESPACE}_auth_login_attempts_total",
    "Authentication attempts partitioned by outcome.",
    ["outcome"],
    registry=REGISTRY,
)

SUPPLIER_WRITES = Counter(
    f"{settings.METRICS_NAMESPACE}_supplier_writes_total",
    "Supplier store mutations partitioned by operation and outcome.",
    ["operation", "outcome"],
    registry=REGISTRY,
)


def normalize_path(request: Any) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if path:
        return path
    return request.url.path


def record_request_metrics(request: Any, status_code: int, elapsed: float) -> None:
    if not settings.METRICS_ENABLED:
        return
    labels = (request.method, normalize_path(request), str(status_code))
    REQUEST_COUNT.labels(*labels).inc()
    REQUEST_LATENCY.labels(*labels).observe(elapsed)
    if status_code >= 400:
        REQUEST_ERRORS.labels(*labels).inc()


def record_login_attempt(outcome: str) -> None:
    if settings.METRICS_ENABLED:
        LOGIN_ATTEMPTS.labels(outcome=outcome).inc()


def record_supplier_write(operation: str, rows: int) -> None:
    if settings.METRICS_ENABLED:
        SUPPLIER_WRITES.labels(operation=operation, outcome="ok" if rows > 0 else "failed").inc()


def export_metrics() -> tuple[bytes, str]:
    if not settings.METRICS_ENABLED:
        return b"", "text/plain; charset=utf-8"
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
