"""Schemas for issue categorisation, typed or spoken."""

from pydantic import BaseModel


class CategorizeIssueRequest(BaseModel):
    text: str


class ClassificationResponse(BaseModel):
    category: str
    subcategory: str


class TranscriptClassificationResponse(BaseModel):
    transcript: str
    classification: ClassificationResponse
