"""Error taxonomy shared by the gateways, parsers and the task orchestrator.

Controllers only need to know about `InsightError`: everything raised below
the HTTP layer derives from it, and the concrete subclass decides the status
code that ends up in the `{error}` response body.
"""

from __future__ import annotations

from enum import Enum


class InsightError(RuntimeError):
    """Base class for failures raised while serving an insight task."""


class TaskValidationError(InsightError):
    """Raised when a request is missing fields its task kind requires."""


class MissingUploadError(TaskValidationError):
    """Raised when an audio task arrives without an attached file."""


class GatewayErrorKind(str, Enum):
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    INVALID_RESPONSE = "invalid_response"
    REJECTED = "rejected"


class GatewayError(InsightError):
    """Raised when an external service call fails at the transport level."""

    def __init__(
        self,
        kind: GatewayErrorKind,
        message: str,
        *,
        gateway: str = "unknown",
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.gateway = gateway

    def __str__(self) -> str:
        return f"[{self.gateway}:{self.kind.value}] {super().__str__()}"


class ParseError(InsightError):
    """Raised when model output does not match the shape a task expects."""

    def __init__(self, message: str, *, raw_text: str | None = None) -> None:
        super().__init__(message)
        self.raw_text = raw_text


__all__ = [
    "InsightError",
    "TaskValidationError",
    "MissingUploadError",
    "GatewayErrorKind",
    "GatewayError",
    "ParseError",
]
