"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    GATEWAY_FAILURES,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    TASK_OUTCOMES,
    observe_gateway_failure,
    observe_request,
    observe_task,
)

__all__ = [
    "ERROR_COUNTER",
    "GATEWAY_FAILURES",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "TASK_OUTCOMES",
    "observe_gateway_failure",
    "observe_request",
    "observe_task",
]
