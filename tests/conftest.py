"""Shared fakes for the gateways plus an HTTP client wired to them."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Keep log files and the report artifact out of the working tree.
_SCRATCH = Path(tempfile.mkdtemp(prefix="insight-tests-"))
os.environ.setdefault("LOG_FILE", str(_SCRATCH / "app.log"))
os.environ.setdefault("PIPELINE_LOG_FILE", str(_SCRATCH / "pipeline.log"))
os.environ.setdefault("TRANSCRIPT_LOG_FILE", str(_SCRATCH / "transcripts.log"))
os.environ.setdefault("REPORT_PATH", str(_SCRATCH / "data.json"))

from app.application.interfaces import (  # noqa: E402
    ModelGateway,
    ReportStore,
    RetrievalGateway,
    RetrievedSnippet,
    TranscriptionGateway,
)
from app.pipelines.orchestrator import TaskOrchestrator  # noqa: E402
from app.services.report_store import ReportStoreError  # noqa: E402

VALID_REPORT = {
    "overallSummary": "Customer asked about a roaming charge; agent waived it.",
    "agentSummary": "Agent verified the account and issued a credit.",
    "customerSummary": "Customer disputed a roaming charge on their bill.",
    "conversationalInsight": {
        "csatScore": 85,
        "conversationResult": "Charge waived",
        "customerSentiment": "Positive",
        "overallCallDuration": "04:12",
    },
    "overallPerformance": 90,
    "aiInsight": {
        "introduction": 80,
        "recommendation": 70,
        "thankYouMessage": 100,
        "attitude": 95,
        "communicationSkills": 88,
    },
    "timeConsumption": {"agent": 45, "customer": 40, "notTalking": 15},
    "topicsDiscussed": {"Roaming": 40, "Billing": 30, "Refunds": 20, "Plans": 10},
}


class FakeModel(ModelGateway):
    """Returns scripted replies in order and records every call."""

    def __init__(self, replies: Sequence[str | Exception] = ()) -> None:
        self.replies = list(replies)
        self.calls: list[dict] = []

    async def complete(self, user_content, context, system_directive, *, max_tokens=None):
        self.calls.append(
            {
                "user": user_content,
                "context": context,
                "system": system_directive,
                "max_tokens": max_tokens,
            }
        )
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeRetriever(RetrievalGateway):
    def __init__(self, snippets: Sequence[RetrievedSnippet] = ()) -> None:
        self.snippets = tuple(snippets)
        self.queries: list[str] = []

    async def search(self, query_text):
        self.queries.append(query_text)
        return self.snippets


class FakeTranscriber(TranscriptionGateway):
    def __init__(self, transcript: str | Exception = "My bill has a scam charge") -> None:
        self.transcript = transcript
        self.calls: list[tuple[bytes, str]] = []

    async def transcribe(self, audio_bytes, content_type):
        self.calls.append((audio_bytes, content_type))
        if isinstance(self.transcript, Exception):
            raise self.transcript
        return self.transcript


class MemoryReportStore(ReportStore):
    def __init__(self, fail: bool = False) -> None:
        self.payload: Optional[str] = None
        self.writes = 0
        self.fail = fail

    async def write(self, payload):
        self.writes += 1
        if self.fail:
            raise ReportStoreError("disk full")
        self.payload = payload

    async def read(self):
        return self.payload


class Harness:
    """Bundle of fakes plus the orchestrator built from them."""

    def __init__(self, max_audio_bytes: int = 1024) -> None:
        self.model = FakeModel()
        self.retriever = FakeRetriever()
        self.transcriber = FakeTranscriber()
        self.store = MemoryReportStore()
        self.max_audio_bytes = max_audio_bytes

    @property
    def orchestrator(self) -> TaskOrchestrator:
        return TaskOrchestrator(
            model=self.model,
            retriever=self.retriever,
            transcriber=self.transcriber,
            report_store=self.store,
            max_audio_bytes=self.max_audio_bytes,
            report_max_tokens=1500,
        )


@pytest.fixture
def harness() -> Harness:
    return Harness()


@pytest.fixture
def client(harness: Harness):
    """TestClient whose orchestrator is backed by the harness fakes."""

    from fastapi.testclient import TestClient

    from app.controllers.dependencies import get_orchestrator
    from app.main import app

    app.dependency_overrides[get_orchestrator] = lambda: harness.orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()
