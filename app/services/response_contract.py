"""Parsers and pydantic models for validating model output.

Every prompt kind has exactly one result shape (see `RESULT_TYPES`). A reply
that does not match its contract is a `ParseError`, never a best-effort guess.
JSON wrapped in Markdown fences is rejected rather than unwrapped.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Dict, Union

from pydantic import BaseModel, Field, ValidationError

from app.services.errors import ParseError
from app.services.prompt_builder import PromptKind

CATEGORY_MARKER = "Category:"
SUBCATEGORY_MARKER = "Subcategory:"


class ConversationalInsight(BaseModel):
    csat_score: float = Field(alias="csatScore", ge=0, le=100)
    conversation_result: str = Field(alias="conversationResult")
    customer_sentiment: str = Field(alias="customerSentiment")
    overall_call_duration: str = Field(alias="overallCallDuration")

    model_config = {"populate_by_name": True}


class AiInsight(BaseModel):
    introduction: float = Field(ge=0, le=100)
    recommendation: float = Field(ge=0, le=100)
    thank_you_message: float = Field(alias="thankYouMessage", ge=0, le=100)
    attitude: float = Field(ge=0, le=100)
    communication_skills: float = Field(alias="communicationSkills", ge=0, le=100)

    model_config = {"populate_by_name": True}


class TimeConsumption(BaseModel):
    agent: float = Field(ge=0, le=100)
    customer: float = Field(ge=0, le=100)
    not_talking: float = Field(alias="notTalking", ge=0, le=100)

    model_config = {"populate_by_name": True}


class AnalysisReport(BaseModel):
    """Fixed-shape conversation quality report produced by the model."""

    overall_summary: str = Field(alias="overallSummary")
    agent_summary: str = Field(alias="agentSummary")
    customer_summary: str = Field(alias="customerSummary")
    conversational_insight: ConversationalInsight = Field(alias="conversationalInsight")
    overall_performance: float = Field(alias="overallPerformance", ge=0, le=100)
    ai_insight: AiInsight = Field(alias="aiInsight")
    time_consumption: TimeConsumption = Field(alias="timeConsumption")
    topics_discussed: Dict[str, float] = Field(alias="topicsDiscussed")

    model_config = {"populate_by_name": True, "frozen": True}

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


@dataclass(frozen=True)
class ScoreResult:
    score: float


@dataclass(frozen=True)
class LabelResult:
    label: str


@dataclass(frozen=True)
class CategoryResult:
    category: str
    subcategory: str


@dataclass(frozen=True)
class JsonReport:
    report: AnalysisReport


ParsedResult = Union[ScoreResult, LabelResult, CategoryResult, JsonReport]


def _parse_score(raw_text: str) -> ScoreResult:
    try:
        score = float(raw_text.strip())
    except ValueError:
        raise ParseError("Model did not return a numeric score.", raw_text=raw_text) from None
    if not math.isfinite(score) or not 0.0 <= score <= 1.0:
        raise ParseError(f"Score {score!r} is outside [0, 1].", raw_text=raw_text)
    return ScoreResult(score=score)


def _parse_label(raw_text: str) -> LabelResult:
    label = raw_text.strip()
    if not label:
        raise ParseError("Model returned an empty label.", raw_text=raw_text)
    return LabelResult(label=label)


def _strip_marker(line: str, marker: str, raw_text: str) -> str:
    if not line.startswith(marker):
        raise ParseError(f"Expected a line starting with {marker!r}.", raw_text=raw_text)
    value = line[len(marker):].strip()
    if not value:
        raise ParseError(f"{marker!r} line has no value.", raw_text=raw_text)
    return value


def _parse_category(raw_text: str) -> CategoryResult:
    lines = [line.strip() for line in raw_text.strip().splitlines() if line.strip()]
    if len(lines) != 2:
        raise ParseError(
            f"Expected a two-line category reply, got {len(lines)} line(s).",
            raw_text=raw_text,
        )
    return CategoryResult(
        category=_strip_marker(lines[0], CATEGORY_MARKER, raw_text),
        subcategory=_strip_marker(lines[1], SUBCATEGORY_MARKER, raw_text),
    )


def _parse_report(raw_text: str) -> JsonReport:
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Report is not valid JSON: {exc}", raw_text=raw_text) from exc
    try:
        return JsonReport(report=AnalysisReport.model_validate(data))
    except ValidationError as exc:
        raise ParseError(
            f"Report does not match the schema: {exc.error_count()} error(s)",
            raw_text=raw_text,
        ) from exc


RESULT_TYPES = {
    PromptKind.ADMIN_SENTIMENT: ScoreResult,
    PromptKind.CUSTOMER_FEELING: LabelResult,
    PromptKind.CUSTOMER_SENTIMENT_SCORE: ScoreResult,
    PromptKind.TOPIC_CHECK: LabelResult,
    PromptKind.RAG_QUERY: LabelResult,
    PromptKind.ANALYSE_CONVERSATION: JsonReport,
    PromptKind.CATEGORIZE_ISSUE: CategoryResult,
}

_PARSERS = {
    ScoreResult: _parse_score,
    LabelResult: _parse_label,
    CategoryResult: _parse_category,
    JsonReport: _parse_report,
}


def parse_response(kind: PromptKind, raw_text: str) -> ParsedResult:
    """Interpret raw model text according to the contract of `kind`."""

    return _PARSERS[RESULT_TYPES[kind]](raw_text)


def band_admin_score(score: float) -> str:
    """Map a professionalism score onto its label."""

    if score <= 0.4:
        return "Not Professional"
    if score < 0.6:
        return "Neutral"
    return "Professional"


__all__ = [
    "AnalysisReport",
    "CategoryResult",
    "JsonReport",
    "LabelResult",
    "ParsedResult",
    "RESULT_TYPES",
    "ScoreResult",
    "band_admin_score",
    "parse_response",
]
