"""Service layer helpers for external integrations."""

from .errors import (
    GatewayError,
    GatewayErrorKind,
    InsightError,
    MissingUploadError,
    ParseError,
    TaskValidationError,
)
from .llm_client import BedrockLlmClient
from .report_store import (
    LocalReportStore,
    ReportStoreError,
    S3ReportStore,
    build_report_store,
)
from .retrieval import KnowledgeBaseRetriever
from .transcribe import TranscribeService, build_transcribe_service

__all__ = [
    "BedrockLlmClient",
    "GatewayError",
    "GatewayErrorKind",
    "InsightError",
    "KnowledgeBaseRetriever",
    "LocalReportStore",
    "MissingUploadError",
    "ParseError",
    "ReportStoreError",
    "S3ReportStore",
    "TaskValidationError",
    "TranscribeService",
    "build_report_store",
    "build_transcribe_service",
]
