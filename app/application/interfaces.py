from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class RetrievedSnippet:
    """One knowledge-base match returned by the retrieval service."""

    text: str
    score: float


class ModelGateway(ABC):
    """Text-completion contract used by the task orchestrator"""

    @abstractmethod
    async def complete(
        self,
        user_content: str,
        context: str,
        system_directive: str,
        *,
        max_tokens: Optional[int] = None,
    ) -> str:
        ...


class RetrievalGateway(ABC):
    """Vector-similarity search contract"""

    @abstractmethod
    async def search(self, query_text: str) -> Sequence[RetrievedSnippet]:
        ...


class TranscriptionGateway(ABC):
    """Speech-to-text contract"""

    @abstractmethod
    async def transcribe(self, audio_bytes: bytes, content_type: str) -> str:
        ...


class ReportStore(ABC):
    """Durable home of the single, named analysis report artifact"""

    @abstractmethod
    async def write(self, payload: str) -> None:
        ...

    @abstractmethod
    async def read(self) -> Optional[str]:
        ...
