"""Task orchestration for every insight endpoint.

`TaskOrchestrator` holds no per-request state: it is built once per process
with its gateways injected, and each call walks the stages documented in
`flow.py`. Gateways and the report store are the only suspension points.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from app.application.interfaces import (
    ModelGateway,
    ReportStore,
    RetrievalGateway,
    TranscriptionGateway,
)
from app.services.errors import TaskValidationError
from app.services.prompt_builder import PromptKind, build_prompt, join_context
from app.services.report_store import ReportStoreError
from app.services.response_contract import (
    AnalysisReport,
    CategoryResult,
    ParsedResult,
    band_admin_score,
    parse_response,
)

from .audio.ingestion import ensure_within_limit
from .flow import StageTracker, TaskStage
from .types import (
    AdminSentiment,
    CustomerSentiment,
    RagAnswer,
    TaskKind,
    TaskRequest,
    TopicMatches,
    TranscriptClassification,
)

logger = logging.getLogger("app.services.insight_pipeline")
transcript_logger = logging.getLogger("app.logs.transcript")


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


class TaskOrchestrator:
    """Sequence retrieval, prompting, model calls and parsing per task."""

    def __init__(
        self,
        model: ModelGateway,
        retriever: RetrievalGateway,
        transcriber: TranscriptionGateway,
        report_store: ReportStore,
        *,
        max_audio_bytes: int,
        report_max_tokens: Optional[int] = None,
    ) -> None:
        self._model = model
        self._retriever = retriever
        self._transcriber = transcriber
        self._report_store = report_store
        self._max_audio_bytes = max_audio_bytes
        self._report_max_tokens = report_max_tokens
        self._handlers: dict[TaskKind, Callable[[StageTracker, TaskRequest], Awaitable[Any]]] = {
            TaskKind.ADMIN_SENTIMENT: self._admin_sentiment,
            TaskKind.CUSTOMER_SENTIMENT: self._customer_sentiment,
            TaskKind.TOPIC_CHECK: self._topic_check,
            TaskKind.RAG_QUERY: self._rag_query,
            TaskKind.ANALYSE_CONVERSATION: self._analyse_conversation,
            TaskKind.CATEGORIZE_ISSUE: self._categorize_issue,
            TaskKind.TRANSCRIBE_AND_CLASSIFY: self._transcribe_and_classify,
        }

    async def run(self, request: TaskRequest) -> Any:
        """Execute one request end to end; returns the task's typed outcome."""

        tracker = StageTracker(request.kind)
        try:
            request.validate()
        except TaskValidationError as exc:
            tracker.fail(TaskStage.RECEIVED, exc)
            raise

        result = await self._handlers[request.kind](tracker, request)
        tracker.complete()
        return result

    async def admin_sentiment(self, message: str) -> AdminSentiment:
        return await self.run(TaskRequest(TaskKind.ADMIN_SENTIMENT, text=message))

    async def customer_sentiment(self, message: str) -> CustomerSentiment:
        return await self.run(TaskRequest(TaskKind.CUSTOMER_SENTIMENT, text=message))

    async def check_topics(self, message: str, topics: str | Sequence[str]) -> TopicMatches:
        return await self.run(TaskRequest(TaskKind.TOPIC_CHECK, text=message, topics=topics))

    async def query(self, query_text: str) -> RagAnswer:
        return await self.run(TaskRequest(TaskKind.RAG_QUERY, text=query_text))

    async def analyse_conversation(self, chat_data: str | Sequence[Any]) -> AnalysisReport:
        return await self.run(TaskRequest(TaskKind.ANALYSE_CONVERSATION, text=chat_data))

    async def categorize_issue(self, text: str) -> CategoryResult:
        return await self.run(TaskRequest(TaskKind.CATEGORIZE_ISSUE, text=text))

    async def transcribe_and_classify(
        self,
        audio: Optional[bytes],
        content_type: str = "audio/mpeg",
    ) -> TranscriptClassification:
        return await self.run(
            TaskRequest(
                TaskKind.TRANSCRIBE_AND_CLASSIFY,
                audio=audio,
                content_type=content_type,
            )
        )

    async def persist_report(self, report: AnalysisReport) -> None:
        """Background job: overwrite the stored report, logging any failure."""

        try:
            await self._report_store.write(report.to_json())
        except ReportStoreError:
            logger.exception("Failed to persist analysis report")
            return
        logger.info("Analysis report saved")

    async def load_report(self) -> Optional[str]:
        return await self._report_store.read()

    async def _ask(
        self,
        tracker: StageTracker,
        kind: PromptKind,
        payload: str | Sequence[Any],
        *,
        topics: str | Sequence[str] | None = None,
        context: str = "",
    ) -> ParsedResult:
        """One BuildPrompt -> InvokeModel -> ParseResponse round."""

        with tracker.stage(TaskStage.BUILD_PROMPT):
            bundle = build_prompt(kind, payload, topics=topics, context=context)

        max_tokens = (
            self._report_max_tokens if kind is PromptKind.ANALYSE_CONVERSATION else None
        )
        with tracker.stage(TaskStage.INVOKE_MODEL):
            raw_reply = await self._model.complete(
                bundle.user_prompt,
                bundle.context,
                bundle.system_prompt,
                max_tokens=max_tokens,
            )
        logger.info("Model reply prompt=%s: %s", kind.value, _truncate(raw_reply))

        with tracker.stage(TaskStage.PARSE_RESPONSE):
            return parse_response(kind, raw_reply)

    async def _admin_sentiment(self, tracker: StageTracker, request: TaskRequest) -> AdminSentiment:
        parsed = await self._ask(tracker, PromptKind.ADMIN_SENTIMENT, request.text)
        return AdminSentiment(label=band_admin_score(parsed.score), score=parsed.score)

    async def _customer_sentiment(
        self, tracker: StageTracker, request: TaskRequest
    ) -> CustomerSentiment:
        feeling = await self._ask(tracker, PromptKind.CUSTOMER_FEELING, request.text)
        scored = await self._ask(tracker, PromptKind.CUSTOMER_SENTIMENT_SCORE, request.text)
        return CustomerSentiment(label=feeling.label, score=scored.score)

    async def _topic_check(self, tracker: StageTracker, request: TaskRequest) -> TopicMatches:
        parsed = await self._ask(
            tracker, PromptKind.TOPIC_CHECK, request.text, topics=request.topics
        )
        return TopicMatches(response=parsed.label)

    async def _rag_query(self, tracker: StageTracker, request: TaskRequest) -> RagAnswer:
        with tracker.stage(TaskStage.RETRIEVE_CONTEXT):
            snippets = tuple(await self._retriever.search(str(request.text)))
        if not snippets:
            logger.info("No knowledge base matches; answering from general knowledge")

        parsed = await self._ask(
            tracker, PromptKind.RAG_QUERY, request.text, context=join_context(snippets)
        )
        return RagAnswer(response=parsed.label, context=snippets)

    async def _analyse_conversation(
        self, tracker: StageTracker, request: TaskRequest
    ) -> AnalysisReport:
        parsed = await self._ask(tracker, PromptKind.ANALYSE_CONVERSATION, request.text)
        return parsed.report

    async def _categorize_issue(self, tracker: StageTracker, request: TaskRequest) -> CategoryResult:
        return await self._ask(tracker, PromptKind.CATEGORIZE_ISSUE, request.text)

    async def _transcribe_and_classify(
        self, tracker: StageTracker, request: TaskRequest
    ) -> TranscriptClassification:
        audio = request.audio or b""
        with tracker.stage(TaskStage.VALIDATE_AUDIO):
            ensure_within_limit(audio, self._max_audio_bytes)

        with tracker.stage(TaskStage.TRANSCRIBE):
            transcript = await self._transcriber.transcribe(audio, request.content_type)
        transcript_logger.info(
            "customer | bytes=%s | content_type=%s | text=%s",
            len(audio),
            request.content_type,
            transcript,
        )

        classification = await self._ask(tracker, PromptKind.CATEGORIZE_ISSUE, transcript)
        return TranscriptClassification(transcript=transcript, classification=classification)


__all__ = ["TaskOrchestrator"]
