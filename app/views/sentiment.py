"""Schemas for the admin/customer sentiment endpoints."""

from pydantic import BaseModel, Field


class MessageRequest(BaseModel):
    message: str = Field(..., description="Single chat message to evaluate")


class AdminSentimentResponse(BaseModel):
    admin_sentiment: str
    admin_sentiment_score: float = Field(..., ge=0, le=1)


class CustomerSentimentResponse(BaseModel):
    customer_sentiment: str
    customer_sentiment_score: float = Field(..., ge=0, le=1)
