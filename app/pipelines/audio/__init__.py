"""Audio ingestion stage of the transcribe-and-classify task.

Transcription and classification themselves are sequenced by
`app.pipelines.orchestrator.TaskOrchestrator`; this package only turns an
HTTP upload into bytes plus a content type and enforces the size ceiling.
"""

from .ingestion import ensure_within_limit, read_audio_bytes, resolve_content_type

__all__ = [
    "ensure_within_limit",
    "read_audio_bytes",
    "resolve_content_type",
]
