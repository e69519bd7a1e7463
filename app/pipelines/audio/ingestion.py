"""Upload ingestion helpers for the transcribe-and-classify pipeline."""

from __future__ import annotations

import mimetypes

from fastapi import UploadFile

from app.services.errors import TaskValidationError

_DEFAULT_CONTENT_TYPE = "audio/mpeg"


def resolve_content_type(audio_file: UploadFile) -> str:
    """Use the client's content-type, falling back to the filename extension."""

    content_type = audio_file.content_type
    if (not content_type or content_type == "application/octet-stream") and audio_file.filename:
        guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        content_type = guessed_type or content_type

    return content_type or _DEFAULT_CONTENT_TYPE


async def read_audio_bytes(audio_file: UploadFile, max_bytes: int) -> bytes:
    """Load the upload into memory, reading at most one byte past the ceiling.

    The extra byte is enough for `ensure_within_limit` to notice an oversize
    payload without buffering the whole thing.
    """

    try:
        return await audio_file.read(max_bytes + 1)
    finally:
        await audio_file.close()


def ensure_within_limit(audio_bytes: bytes, max_bytes: int) -> None:
    """Reject payloads above the ceiling before any gateway sees them."""

    if len(audio_bytes) > max_bytes:
        raise TaskValidationError(
            f"Audio payload exceeds the {max_bytes} byte limit"
        )


__all__ = ["ensure_within_limit", "read_audio_bytes", "resolve_content_type"]
