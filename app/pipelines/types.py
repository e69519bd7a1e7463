"""Typed containers shared across the insight task pipeline.

These dataclasses live in their own module so that `flow`, `orchestrator`
and the HTTP controllers can import them without circular dependencies.
Every value here is immutable once constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from app.application.interfaces import RetrievedSnippet
from app.services.errors import MissingUploadError, TaskValidationError
from app.services.prompt_builder import PromptKind
from app.services.response_contract import AnalysisReport, CategoryResult


class TaskKind(str, Enum):
    ADMIN_SENTIMENT = "admin_sentiment"
    CUSTOMER_SENTIMENT = "customer_sentiment"
    TOPIC_CHECK = "topic_check"
    RAG_QUERY = "rag_query"
    ANALYSE_CONVERSATION = "analyse_conversation"
    CATEGORIZE_ISSUE = "categorize_issue"
    TRANSCRIBE_AND_CLASSIFY = "transcribe_and_classify"


# Model calls issued by each task, in order.
TASK_PROMPTS: dict[TaskKind, tuple[PromptKind, ...]] = {
    TaskKind.ADMIN_SENTIMENT: (PromptKind.ADMIN_SENTIMENT,),
    TaskKind.CUSTOMER_SENTIMENT: (
        PromptKind.CUSTOMER_FEELING,
        PromptKind.CUSTOMER_SENTIMENT_SCORE,
    ),
    TaskKind.TOPIC_CHECK: (PromptKind.TOPIC_CHECK,),
    TaskKind.RAG_QUERY: (PromptKind.RAG_QUERY,),
    TaskKind.ANALYSE_CONVERSATION: (PromptKind.ANALYSE_CONVERSATION,),
    TaskKind.CATEGORIZE_ISSUE: (PromptKind.CATEGORIZE_ISSUE,),
    TaskKind.TRANSCRIBE_AND_CLASSIFY: (PromptKind.CATEGORIZE_ISSUE,),
}


def _has_text(value: Any) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Sequence):
        return any(_has_text(item) for item in value)
    return bool(value)


@dataclass(frozen=True)
class TaskRequest:
    """One unit of work for the orchestrator."""

    kind: TaskKind
    text: str | Sequence[Any] | None = None
    topics: str | Sequence[str] | None = None
    audio: Optional[bytes] = field(default=None, repr=False)
    content_type: str = "audio/mpeg"

    def validate(self) -> None:
        """Reject requests missing the fields their kind depends on."""

        if self.kind is TaskKind.TRANSCRIBE_AND_CLASSIFY:
            if self.audio is None:
                raise MissingUploadError("No audio file uploaded")
            return
        if not _has_text(self.text):
            raise TaskValidationError(f"{self.kind.value} requires non-empty text")
        if self.kind is TaskKind.TOPIC_CHECK and not _has_text(self.topics):
            raise TaskValidationError("topic_check requires a non-empty topic list")


@dataclass(frozen=True)
class AdminSentiment:
    label: str
    score: float


@dataclass(frozen=True)
class CustomerSentiment:
    label: str
    score: float


@dataclass(frozen=True)
class TopicMatches:
    response: str


@dataclass(frozen=True)
class RagAnswer:
    response: str
    context: tuple[RetrievedSnippet, ...] = ()


@dataclass(frozen=True)
class TranscriptClassification:
    transcript: str
    classification: CategoryResult


__all__ = [
    "AdminSentiment",
    "AnalysisReport",
    "CustomerSentiment",
    "RagAnswer",
    "TASK_PROMPTS",
    "TaskKind",
    "TaskRequest",
    "TopicMatches",
    "TranscriptClassification",
]
