"""Sentiment endpoints for admin and customer chat messages."""

import logging

from fastapi import APIRouter, HTTPException, status

from app.controllers.dependencies import OrchestratorDep
from app.services.errors import InsightError
from app.views import (
    AdminSentimentResponse,
    CustomerSentimentResponse,
    ErrorResponse,
    MessageRequest,
)

router = APIRouter(
    tags=["sentiment"],
    responses={500: {"model": ErrorResponse}},
)

logger = logging.getLogger(__name__)

_GENERIC_ERROR = "An error occurred while processing your request."


@router.post("/adminSentiment", response_model=AdminSentimentResponse)
async def admin_sentiment(
    payload: MessageRequest,
    orchestrator: OrchestratorDep,
) -> AdminSentimentResponse:
    """Score how professional an admin message is and band the score."""

    try:
        result = await orchestrator.admin_sentiment(payload.message)
    except InsightError as exc:
        logger.exception("Error processing admin sentiment request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_GENERIC_ERROR,
        ) from exc

    return AdminSentimentResponse(
        admin_sentiment=result.label,
        admin_sentiment_score=result.score,
    )


@router.post("/customerSentiment", response_model=CustomerSentimentResponse)
async def customer_sentiment(
    payload: MessageRequest,
    orchestrator: OrchestratorDep,
) -> CustomerSentimentResponse:
    """Describe the customer's feeling in one word plus a 0-1 sentiment score."""

    try:
        result = await orchestrator.customer_sentiment(payload.message)
    except InsightError as exc:
        logger.exception("Error processing customer sentiment request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_GENERIC_ERROR,
        ) from exc

    return CustomerSentimentResponse(
        customer_sentiment=result.label,
        customer_sentiment_score=result.score,
    )
