"""Schemas for topic detection, RAG answers and conversation analysis."""

from typing import Any, List, Union

from pydantic import BaseModel, Field


class TopicCheckRequest(BaseModel):
    message: str
    topics: Union[str, List[str]] = Field(
        ..., description="Numbered topic list, as text or one entry per topic"
    )


class QueryRequest(BaseModel):
    query_text: str = Field(..., alias="queryText")

    model_config = {"populate_by_name": True}


class AiResponse(BaseModel):
    ai_response: str = Field(..., alias="aiResponse")

    model_config = {"populate_by_name": True}


class AnalyseConversationRequest(BaseModel):
    chat_data: Union[str, List[Any]] = Field(
        ..., alias="chatData", description="Full chat transcript or list of messages"
    )

    model_config = {"populate_by_name": True}
