"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .conversation import (
    AiResponse,
    AnalyseConversationRequest,
    QueryRequest,
    TopicCheckRequest,
)
from .issues import (
    CategorizeIssueRequest,
    ClassificationResponse,
    TranscriptClassificationResponse,
)
from .sentiment import (
    AdminSentimentResponse,
    CustomerSentimentResponse,
    MessageRequest,
)

__all__ = [
    "AdminSentimentResponse",
    "AiResponse",
    "AnalyseConversationRequest",
    "CategorizeIssueRequest",
    "ClassificationResponse",
    "CustomerSentimentResponse",
    "ErrorResponse",
    "MessageRequest",
    "QueryRequest",
    "TopicCheckRequest",
    "TranscriptClassificationResponse",
]
