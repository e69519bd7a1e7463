"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config.settings import settings
from app.pipelines.orchestrator import TaskOrchestrator
from app.services.llm_client import BedrockLlmClient
from app.services.report_store import build_report_store
from app.services.retrieval import KnowledgeBaseRetriever
from app.services.transcribe import build_transcribe_service


@lru_cache(maxsize=1)
def get_orchestrator() -> TaskOrchestrator:
    """Build the process-wide orchestrator on first use."""

    return TaskOrchestrator(
        model=BedrockLlmClient(),
        retriever=KnowledgeBaseRetriever(),
        transcriber=build_transcribe_service(),
        report_store=build_report_store(),
        max_audio_bytes=settings.max_audio_bytes,
        report_max_tokens=settings.bedrock.report_max_tokens,
    )


OrchestratorDep = Annotated[TaskOrchestrator, Depends(get_orchestrator)]


__all__ = ["get_orchestrator", "OrchestratorDep"]
