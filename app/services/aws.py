"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from app.config.settings import settings
from app.services.errors import GatewayError, GatewayErrorKind

_RATE_LIMIT_CODES = frozenset(
    {
        "ThrottlingException",
        "TooManyRequestsException",
        "ServiceQuotaExceededException",
        "LimitExceededException",
    }
)
_TIMEOUT_CODES = frozenset({"ModelTimeoutException", "RequestTimeout", "RequestTimeoutException"})
_REJECTED_CODES = frozenset({"ValidationException", "BadRequestException"})


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
) -> boto3.client:
    """Instantiate a boto3 client using configured credentials if available.

    botocore's own retry loop is capped at a single attempt: retry policy
    belongs to the caller of the insight API, not to the gateways.
    """

    region = region_name or settings.aws.region
    client_kwargs: dict[str, Any] = {
        "region_name": region,
        "config": Config(
            connect_timeout=settings.aws.connect_timeout,
            read_timeout=settings.aws.read_timeout,
            retries={"total_max_attempts": 1, "mode": "standard"},
        ),
    }
    if settings.aws.access_key_id and settings.aws.secret_access_key:
        client_kwargs["aws_access_key_id"] = settings.aws.access_key_id
        client_kwargs["aws_secret_access_key"] = (
            settings.aws.secret_access_key.get_secret_value()
        )
    return boto3.client(service_name, **client_kwargs)


def gateway_error_from_boto(exc: Exception, *, gateway: str) -> GatewayError:
    """Translate a botocore failure into the gateway error taxonomy."""

    if isinstance(exc, (ReadTimeoutError, ConnectTimeoutError)):
        return GatewayError(GatewayErrorKind.TIMEOUT, str(exc), gateway=gateway)
    if isinstance(exc, EndpointConnectionError):
        return GatewayError(GatewayErrorKind.UNAVAILABLE, str(exc), gateway=gateway)
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code", "")
        if code in _RATE_LIMIT_CODES:
            kind = GatewayErrorKind.RATE_LIMITED
        elif code in _TIMEOUT_CODES:
            kind = GatewayErrorKind.TIMEOUT
        elif code in _REJECTED_CODES:
            kind = GatewayErrorKind.REJECTED
        else:
            kind = GatewayErrorKind.UNAVAILABLE
        return GatewayError(kind, f"{code or 'ClientError'}: {exc}", gateway=gateway)
    if isinstance(exc, BotoCoreError):
        return GatewayError(GatewayErrorKind.UNAVAILABLE, str(exc), gateway=gateway)
    return GatewayError(GatewayErrorKind.UNAVAILABLE, repr(exc), gateway=gateway)


__all__ = ["create_boto3_client", "gateway_error_from_boto"]
