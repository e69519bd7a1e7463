"""Amazon Transcribe integration helpers using Streaming API."""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import tempfile
from typing import Final

from amazon_transcribe.client import TranscribeStreamingClient
from amazon_transcribe.exceptions import (
    BadRequestException,
    LimitExceededException,
    SerializationException,
)
from amazon_transcribe.handlers import TranscriptResultStreamHandler
from amazon_transcribe.model import TranscriptEvent
from fastapi.concurrency import run_in_threadpool

from app.application.interfaces import TranscriptionGateway
from app.config.settings import settings
from app.services.errors import GatewayError, GatewayErrorKind

logger = logging.getLogger(__name__)

_GATEWAY_NAME = "transcribe"
_CHUNK_SIZE = 8192

SUPPORTED_CONTENT_TYPES: Final[frozenset[str]] = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/mp4",
        "audio/x-m4a",
        "audio/m4a",
        "audio/wav",
        "audio/wave",
        "audio/x-wav",
        "audio/webm",
        "audio/ogg",
    }
)


def _base_content_type(content_type: str) -> str:
    # "audio/webm;codecs=opus" -> "audio/webm"
    return content_type.split(";", 1)[0].strip().lower()


class TranscribeService(TranscriptionGateway):
    """High-level facade for streaming audio to Amazon Transcribe."""

    def __init__(
        self,
        region: str,
        language_code: str = "en-US",
        media_sample_rate_hz: int = 16000,
        media_encoding: str = "pcm",
        timeout_seconds: float = 120.0,
    ) -> None:
        self._region = region
        self._language_code = language_code
        self._media_sample_rate_hz = media_sample_rate_hz
        self._media_encoding = media_encoding
        self._timeout_seconds = timeout_seconds

        # The streaming SDK resolves credentials from the environment only.
        if settings.aws.access_key_id:
            os.environ["AWS_ACCESS_KEY_ID"] = settings.aws.access_key_id
        if settings.aws.secret_access_key:
            os.environ["AWS_SECRET_ACCESS_KEY"] = (
                settings.aws.secret_access_key.get_secret_value()
            )

        self._client = TranscribeStreamingClient(region=region)

    async def transcribe(self, audio_bytes: bytes, content_type: str) -> str:
        """Stream audio to Transcribe and return the full transcript."""

        if not audio_bytes:
            raise GatewayError(
                GatewayErrorKind.REJECTED,
                "The uploaded audio file is empty.",
                gateway=_GATEWAY_NAME,
            )
        if _base_content_type(content_type) not in SUPPORTED_CONTENT_TYPES:
            raise GatewayError(
                GatewayErrorKind.REJECTED,
                f"Unsupported audio format: {content_type}",
                gateway=_GATEWAY_NAME,
            )

        pcm_data = await self._convert_to_pcm(audio_bytes)

        try:
            transcript = await asyncio.wait_for(
                self._stream(pcm_data),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise GatewayError(
                GatewayErrorKind.TIMEOUT,
                f"Transcription exceeded {self._timeout_seconds:.0f}s.",
                gateway=_GATEWAY_NAME,
            ) from exc
        except LimitExceededException as exc:
            raise GatewayError(
                GatewayErrorKind.RATE_LIMITED, str(exc), gateway=_GATEWAY_NAME
            ) from exc
        except (BadRequestException, SerializationException) as exc:
            raise GatewayError(
                GatewayErrorKind.REJECTED, str(exc), gateway=_GATEWAY_NAME
            ) from exc
        except Exception as exc:
            logger.error("Streaming loop failed: %s", exc)
            raise GatewayError(
                GatewayErrorKind.UNAVAILABLE,
                f"Streaming transcription failed: {exc}",
                gateway=_GATEWAY_NAME,
            ) from exc

        if not transcript:
            raise GatewayError(
                GatewayErrorKind.INVALID_RESPONSE,
                "Transcribe returned an empty transcript.",
                gateway=_GATEWAY_NAME,
            )
        logger.info("Transcription complete. Length: %s", len(transcript))
        return transcript

    async def _stream(self, pcm_data: bytes) -> str:
        stream = await self._client.start_stream_transcription(
            language_code=self._language_code,
            media_sample_rate_hz=self._media_sample_rate_hz,
            media_encoding=self._media_encoding,
        )
        handler = _SimpleTranscriptHandler(stream.output_stream)

        async def write_chunks() -> None:
            # Pace chunks at roughly real time: 16-bit mono = 2 bytes/sample.
            bytes_per_sec = self._media_sample_rate_hz * 2
            sleep_time = _CHUNK_SIZE / bytes_per_sec

            logger.info(
                "Starting stream. Total bytes: %s. Chunk size: %s. Sleep: %.4fs",
                len(pcm_data),
                _CHUNK_SIZE,
                sleep_time,
            )
            for i in range(0, len(pcm_data), _CHUNK_SIZE):
                await stream.input_stream.send_audio_event(
                    audio_chunk=pcm_data[i : i + _CHUNK_SIZE]
                )
                await asyncio.sleep(sleep_time)

            logger.info("Finished streaming audio bytes. Ending stream.")
            await stream.input_stream.end_stream()

        tasks = [
            asyncio.ensure_future(write_chunks()),
            asyncio.ensure_future(handler.handle_events()),
        ]
        try:
            await asyncio.gather(*tasks)
        finally:
            # A failed writer never ends the stream, so the reader would block forever.
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        return handler.transcript.strip()

    async def _convert_to_pcm(self, audio_bytes: bytes) -> bytes:
        """Convert input audio to raw PCM s16le via ffmpeg using a thread."""
        return await run_in_threadpool(self._convert_to_pcm_sync, audio_bytes)

    def _convert_to_pcm_sync(self, audio_bytes: bytes) -> bytes:
        """Synchronous ffmpeg conversion using a temporary file to support seeking."""

        with tempfile.NamedTemporaryFile(delete=False, suffix=".tmp") as tmp_file:
            tmp_file.write(audio_bytes)
            tmp_path = tmp_file.name

        try:
            process = subprocess.run(
                [
                    "ffmpeg",
                    "-y",
                    "-i", tmp_path,
                    "-f", "s16le",
                    "-ac", "1",
                    "-ar", str(self._media_sample_rate_hz),
                    "pipe:1",
                ],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            stderr = getattr(exc, "stderr", None)
            error_msg = stderr.decode("utf-8", errors="replace") if stderr else str(exc)
            logger.error("ffmpeg failed. stderr: %s", error_msg)
            raise GatewayError(
                GatewayErrorKind.REJECTED,
                f"ffmpeg failed to convert audio to PCM: {error_msg}",
                gateway=_GATEWAY_NAME,
            ) from exc
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

        if not process.stdout:
            raise GatewayError(
                GatewayErrorKind.REJECTED,
                "ffmpeg produced no audio samples.",
                gateway=_GATEWAY_NAME,
            )
        return process.stdout


class _SimpleTranscriptHandler(TranscriptResultStreamHandler):
    def __init__(self, transcript_result_stream):
        super().__init__(transcript_result_stream)
        self.transcript = ""

    async def handle_transcript_event(self, transcript_event: TranscriptEvent):
        for result in transcript_event.transcript.results:
            if not result.is_partial:
                for alt in result.alternatives:
                    self.transcript += alt.transcript + " "


def build_transcribe_service() -> TranscribeService:
    """Construct the streaming service from settings."""

    return TranscribeService(
        region=settings.transcribe.region or settings.aws.region,
        language_code=settings.transcribe.language_code,
        media_sample_rate_hz=settings.transcribe.media_sample_rate_hz,
        timeout_seconds=settings.transcribe.timeout_seconds,
    )


__all__ = ["SUPPORTED_CONTENT_TYPES", "TranscribeService", "build_transcribe_service"]
