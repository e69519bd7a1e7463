"""Manually transcribe and classify a local recording with the configured services.

Usage: python scripts/transcribe_sample.py [path/to/audio.mp3]
"""

import asyncio
import mimetypes
import os
import sys

# Add project root to path so we can import app
sys.path.append(os.getcwd())

from app.controllers.dependencies import get_orchestrator  # noqa: E402
from app.services.errors import InsightError  # noqa: E402


async def main():
    file_path = sys.argv[1] if len(sys.argv) > 1 else "out.mp3"

    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found. Please provide a path to an audio file.")
        print("Usage: python scripts/transcribe_sample.py [path/to/audio.mp3]")
        return

    with open(file_path, "rb") as f:
        audio_bytes = f.read()
    content_type = mimetypes.guess_type(file_path)[0] or "audio/mpeg"

    print(f"Transcribing {len(audio_bytes)} bytes ({content_type}) using Amazon Transcribe Streaming...")
    try:
        result = await get_orchestrator().transcribe_and_classify(audio_bytes, content_type)
    except InsightError as e:
        print(f"\nPipeline error: {e}")
        return

    print("\n--- Transcript ---")
    print(result.transcript)
    print("--- Classification ---")
    print(f"Category: {result.classification.category}")
    print(f"Subcategory: {result.classification.subcategory}")


if __name__ == "__main__":
    asyncio.run(main())
