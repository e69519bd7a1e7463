"""Stage map and per-request state tracking for insight tasks.

Every request walks a strictly linear sequence of stages:

1. ``received`` – the request object has been validated.
2. ``validate_audio`` – (audio only) size ceiling check before any upload.
3. ``transcribe`` – (audio only) speech-to-text via the transcription gateway.
4. ``retrieve_context`` – (RAG only) knowledge-base lookup.
5. ``build_prompt`` – render system/user prompts for the prompt kind.
6. ``invoke_model`` – call the text-completion service.
7. ``parse_response`` – validate the reply against its contract.

The walk ends in ``completed`` or, on the first unrecovered error, in
``failed``; the originating exception is re-raised untouched.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from app.services.errors import GatewayError
from app.telemetry import observe_gateway_failure, observe_task

from .types import TASK_PROMPTS, TaskKind

logger = logging.getLogger("app.services.insight_pipeline")


class TaskStage(str, Enum):
    RECEIVED = "received"
    VALIDATE_AUDIO = "validate_audio"
    TRANSCRIBE = "transcribe"
    RETRIEVE_CONTEXT = "retrieve_context"
    BUILD_PROMPT = "build_prompt"
    INVOKE_MODEL = "invoke_model"
    PARSE_RESPONSE = "parse_response"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage."""

    order: int
    stage: TaskStage
    summary: str


_MODEL_ROUND = (TaskStage.BUILD_PROMPT, TaskStage.INVOKE_MODEL, TaskStage.PARSE_RESPONSE)

_SUMMARIES = {
    TaskStage.RECEIVED: "Request accepted and its required fields checked.",
    TaskStage.VALIDATE_AUDIO: "Reject uploads above the configured size ceiling.",
    TaskStage.TRANSCRIBE: "Convert the recording to text with Amazon Transcribe.",
    TaskStage.RETRIEVE_CONTEXT: "Fetch the top-K knowledge base snippets for the query.",
    TaskStage.BUILD_PROMPT: "Render the fixed directive and user content for the prompt kind.",
    TaskStage.INVOKE_MODEL: "Send the prompt to Bedrock and collect the raw reply.",
    TaskStage.PARSE_RESPONSE: "Validate the reply against the prompt kind's contract.",
    TaskStage.COMPLETED: "Typed result handed back to the caller.",
}


def stages_for(kind: TaskKind) -> tuple[TaskStage, ...]:
    """Ordered stages a successful request of `kind` passes through."""

    stages: list[TaskStage] = [TaskStage.RECEIVED]
    if kind is TaskKind.TRANSCRIBE_AND_CLASSIFY:
        stages += [TaskStage.VALIDATE_AUDIO, TaskStage.TRANSCRIBE]
    if kind is TaskKind.RAG_QUERY:
        stages.append(TaskStage.RETRIEVE_CONTEXT)
    for _ in TASK_PROMPTS[kind]:
        stages.extend(_MODEL_ROUND)
    stages.append(TaskStage.COMPLETED)
    return tuple(stages)


def describe(kind: TaskKind) -> tuple[PipelineStage, ...]:
    """Expose the ordered stage list for debugging and documentation."""

    return tuple(
        PipelineStage(order, stage, _SUMMARIES[stage])
        for order, stage in enumerate(stages_for(kind), start=1)
    )


class StageTracker:
    """Records the stages one request visits and reports its outcome."""

    def __init__(self, kind: TaskKind) -> None:
        self.kind = kind
        self.history: list[TaskStage] = [TaskStage.RECEIVED]

    @property
    def current(self) -> TaskStage:
        return self.history[-1]

    @contextmanager
    def stage(self, stage: TaskStage) -> Iterator[None]:
        """Enter `stage`; any exception moves the request to FAILED and propagates."""

        self.history.append(stage)
        logger.debug("task=%s stage=%s", self.kind.value, stage.value)
        try:
            yield
        except Exception as exc:
            self.fail(stage, exc)
            raise

    def fail(self, stage: TaskStage, exc: Exception) -> None:
        self.history.append(TaskStage.FAILED)
        if isinstance(exc, GatewayError):
            observe_gateway_failure(exc.gateway, exc.kind.value)
        observe_task(self.kind.value, type(exc).__name__)
        logger.warning(
            "task=%s failed at stage=%s error=%s: %s",
            self.kind.value,
            stage.value,
            type(exc).__name__,
            exc,
        )

    def complete(self) -> None:
        self.history.append(TaskStage.COMPLETED)
        observe_task(self.kind.value, "completed")
        logger.info(
            "task=%s completed stages=%s",
            self.kind.value,
            ",".join(stage.value for stage in self.history),
        )


__all__ = ["PipelineStage", "StageTracker", "TaskStage", "describe", "stages_for"]
