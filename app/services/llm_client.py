"""Thin Bedrock client wrapper for text-completion invocations."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool

from app.application.interfaces import ModelGateway
from app.config.settings import settings
from app.services.aws import create_boto3_client, gateway_error_from_boto
from app.services.errors import GatewayError, GatewayErrorKind

logger = logging.getLogger(__name__)

_GATEWAY_NAME = "bedrock"


class BedrockLlmClient(ModelGateway):
    """Invoke Amazon Bedrock models with standard configuration."""

    def __init__(self, client: Any | None = None) -> None:
        self._model_id = settings.bedrock.model_id
        self._client = client or create_boto3_client(
            "bedrock-runtime",
            region_name=settings.bedrock.region,
        )

    @staticmethod
    def _system_blocks(system_directive: str, context: str) -> list[dict[str, str]]:
        blocks = [{"text": system_directive}]
        if context:
            blocks.append({"text": f"Context:\n{context}"})
        return blocks

    async def complete(
        self,
        user_content: str,
        context: str,
        system_directive: str,
        *,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Run a Bedrock `converse` call and return the aggregate text output."""

        inference_cfg = {
            "maxTokens": max_tokens or settings.bedrock.max_tokens,
            "temperature": settings.bedrock.temperature,
            "topP": settings.bedrock.top_p,
        }

        def _call() -> dict[str, Any]:
            return self._client.converse(
                modelId=self._model_id,
                system=self._system_blocks(system_directive, context),
                messages=[{"role": "user", "content": [{"text": user_content}]}],
                inferenceConfig=inference_cfg,
            )

        try:
            response = await run_in_threadpool(_call)
        except Exception as exc:
            raise gateway_error_from_boto(exc, gateway=_GATEWAY_NAME) from exc

        content_blocks = (
            response.get("output", {})
            .get("message", {})
            .get("content", [])
        )
        texts = [block.get("text", "") for block in content_blocks if block.get("text")]
        result = "\n".join(texts).strip()
        if not result:
            logger.warning(
                "Bedrock returned no text stop_reason=%s", response.get("stopReason")
            )
            raise GatewayError(
                GatewayErrorKind.INVALID_RESPONSE,
                "Model returned an empty completion.",
                gateway=_GATEWAY_NAME,
            )
        return result


__all__ = ["BedrockLlmClient"]
