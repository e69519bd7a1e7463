"""Topic detection, knowledge-base answers and conversation analysis.

`/analyseData` answers as soon as the report has been generated and
validated; writing it to the report store happens afterwards as a
background task, so a storage failure is only logged. `/data` serves
whatever report was written last.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Response, status

from app.controllers.dependencies import OrchestratorDep
from app.services.errors import InsightError
from app.services.report_store import ReportStoreError
from app.views import (
    AiResponse,
    AnalyseConversationRequest,
    ErrorResponse,
    QueryRequest,
    TopicCheckRequest,
)

router = APIRouter(
    tags=["conversation"],
    responses={500: {"model": ErrorResponse}},
)

logger = logging.getLogger(__name__)

_GENERIC_ERROR = "An error occurred while processing your request."


@router.post("/checkTopics", response_model=AiResponse)
async def check_topics(payload: TopicCheckRequest, orchestrator: OrchestratorDep) -> AiResponse:
    try:
        result = await orchestrator.check_topics(payload.message, payload.topics)
    except InsightError as exc:
        logger.exception("Error processing topic check request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_GENERIC_ERROR,
        ) from exc

    return AiResponse(ai_response=result.response)


@router.post("/queryGPT", response_model=AiResponse)
async def query_gpt(payload: QueryRequest, orchestrator: OrchestratorDep) -> AiResponse:
    """Answer a free-text question grounded on knowledge base snippets."""

    try:
        result = await orchestrator.query(payload.query_text)
    except InsightError as exc:
        logger.exception("Error processing knowledge base query")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_GENERIC_ERROR,
        ) from exc

    logger.info("Query answered with %s context snippet(s)", len(result.context))
    return AiResponse(ai_response=result.response)


@router.post("/analyseData", response_class=Response)
async def analyse_data(
    payload: AnalyseConversationRequest,
    background_tasks: BackgroundTasks,
    orchestrator: OrchestratorDep,
) -> Response:
    """Generate the conversation report and schedule it for persistence."""

    try:
        report = await orchestrator.analyse_conversation(payload.chat_data)
    except InsightError as exc:
        logger.exception("Error processing conversation analysis")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_GENERIC_ERROR,
        ) from exc

    background_tasks.add_task(orchestrator.persist_report, report)
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/data",
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def read_report(orchestrator: OrchestratorDep) -> Response:
    """Return the most recently persisted analysis report as stored."""

    try:
        report_json = await orchestrator.load_report()
    except ReportStoreError as exc:
        logger.exception("Error reading analysis report")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_GENERIC_ERROR,
        ) from exc

    if report_json is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No analysis report available",
        )
    return Response(content=report_json, media_type="application/json")
