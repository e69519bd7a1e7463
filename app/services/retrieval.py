"""Bedrock Knowledge Base retrieval used to ground `/queryGPT` answers."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from fastapi.concurrency import run_in_threadpool

from app.application.interfaces import RetrievalGateway, RetrievedSnippet
from app.config.settings import settings
from app.services.aws import create_boto3_client, gateway_error_from_boto
from app.services.errors import GatewayError, GatewayErrorKind

logger = logging.getLogger(__name__)

_GATEWAY_NAME = "knowledge_base"


class KnowledgeBaseRetriever(RetrievalGateway):
    """Query an existing knowledge base index for the top-K matching chunks."""

    def __init__(
        self,
        client: Any | None = None,
        *,
        knowledge_base_id: str | None = None,
        top_k: int | None = None,
    ) -> None:
        self._knowledge_base_id = knowledge_base_id or settings.knowledge_base.knowledge_base_id
        self._top_k = top_k or settings.knowledge_base.top_k
        self._client = client or create_boto3_client(
            "bedrock-agent-runtime",
            region_name=settings.knowledge_base.region,
        )

    async def search(self, query_text: str) -> Sequence[RetrievedSnippet]:
        """Return matches ordered by descending relevance, bounded to top-K."""

        if not self._knowledge_base_id:
            logger.warning("No knowledge base configured; answering without context.")
            return ()

        def _call() -> dict[str, Any]:
            return self._client.retrieve(
                knowledgeBaseId=self._knowledge_base_id,
                retrievalQuery={"text": query_text},
                retrievalConfiguration={
                    "vectorSearchConfiguration": {"numberOfResults": self._top_k}
                },
            )

        try:
            response = await run_in_threadpool(_call)
        except Exception as exc:
            raise gateway_error_from_boto(exc, gateway=_GATEWAY_NAME) from exc

        snippets: list[RetrievedSnippet] = []
        for result in response.get("retrievalResults", []):
            text = (result.get("content") or {}).get("text")
            if not text:
                continue
            try:
                score = float(result.get("score") or 0.0)
            except (TypeError, ValueError) as exc:
                raise GatewayError(
                    GatewayErrorKind.INVALID_RESPONSE,
                    f"Knowledge base returned a non-numeric score: {result.get('score')!r}",
                    gateway=_GATEWAY_NAME,
                ) from exc
            snippets.append(RetrievedSnippet(text=text, score=score))

        snippets.sort(key=lambda snippet: snippet.score, reverse=True)
        logger.debug("Knowledge base returned %s usable matches", len(snippets))
        return tuple(snippets[: self._top_k])


__all__ = ["KnowledgeBaseRetriever"]
