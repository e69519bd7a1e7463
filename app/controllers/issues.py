"""Customer issue classification for typed and spoken inquiries."""

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from app.config.settings import settings
from app.controllers.dependencies import OrchestratorDep
from app.pipelines.audio import read_audio_bytes, resolve_content_type
from app.services.errors import InsightError, MissingUploadError
from app.views import (
    CategorizeIssueRequest,
    ClassificationResponse,
    ErrorResponse,
    TranscriptClassificationResponse,
)

router = APIRouter(
    tags=["issues"],
    responses={500: {"model": ErrorResponse}},
)

logger = logging.getLogger(__name__)

_AUDIO_FILE_UPLOAD = File(None, alias="audioFile")


@router.post("/categorizeIssue", response_model=ClassificationResponse)
async def categorize_issue(
    payload: CategorizeIssueRequest,
    orchestrator: OrchestratorDep,
) -> ClassificationResponse:
    """Place a typed inquiry in the telecom category/subcategory taxonomy."""

    try:
        result = await orchestrator.categorize_issue(payload.text)
    except InsightError as exc:
        logger.exception("Error categorizing issue")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing your request.",
        ) from exc

    return ClassificationResponse(category=result.category, subcategory=result.subcategory)


@router.post(
    "/transcribeAndClassify",
    response_model=TranscriptClassificationResponse,
    responses={400: {"model": ErrorResponse}},
)
async def transcribe_and_classify(
    orchestrator: OrchestratorDep,
    audio_file: Optional[UploadFile] = _AUDIO_FILE_UPLOAD,
) -> TranscriptClassificationResponse:
    """Transcribe a recorded voice issue, then classify the transcript."""

    audio_bytes: bytes | None = None
    content_type = "audio/mpeg"
    if audio_file is not None:
        content_type = resolve_content_type(audio_file)
        audio_bytes = await read_audio_bytes(audio_file, settings.max_audio_bytes)

    try:
        result = await orchestrator.transcribe_and_classify(audio_bytes, content_type)
    except MissingUploadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No audio file uploaded",
        ) from exc
    except InsightError as exc:
        logger.exception("Error processing voice issue")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing the voice issue",
        ) from exc

    return TranscriptClassificationResponse(
        transcript=result.transcript,
        classification=ClassificationResponse(
            category=result.classification.category,
            subcategory=result.classification.subcategory,
        ),
    )
