"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

TASK_OUTCOMES = Counter(
    "insight_tasks_total",
    "Insight tasks processed, by task kind and terminal outcome",
    ("task", "outcome"),
)

GATEWAY_FAILURES = Counter(
    "insight_gateway_failures_total",
    "External service failures surfaced by the gateways",
    ("gateway", "kind"),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_task(task: str, outcome: str) -> None:
    """Count a finished task (`completed` or the failing error class)."""

    TASK_OUTCOMES.labels(task=task, outcome=outcome).inc()


def observe_gateway_failure(gateway: str, kind: str) -> None:
    """Count a transport-level failure from one of the external services."""

    GATEWAY_FAILURES.labels(gateway=gateway, kind=kind).inc()
