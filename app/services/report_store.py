"""Storage for the single, named conversation analysis report.

The report is one artifact overwritten by every `/analyseData` call; two
concurrent writers simply race and the last one wins.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from app.application.interfaces import ReportStore
from app.config.settings import settings
from app.services.aws import create_boto3_client


class ReportStoreError(RuntimeError):
    """Raised when the analysis report cannot be written or read."""


class LocalReportStore(ReportStore):
    """Keep the report as a JSON file on local disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _write_sync(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Write then rename so readers never observe a half-written report.
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                tmp_file.write(payload)
            os.replace(tmp_name, self._path)
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)

    async def write(self, payload: str) -> None:
        try:
            await run_in_threadpool(self._write_sync, payload)
        except OSError as exc:
            raise ReportStoreError(f"Failed to write report to {self._path}: {exc}") from exc

    async def read(self) -> Optional[str]:
        if not self._path.exists():
            return None
        try:
            return await run_in_threadpool(self._path.read_text, encoding="utf-8")
        except OSError as exc:
            raise ReportStoreError(f"Failed to read report from {self._path}: {exc}") from exc


class S3ReportStore(ReportStore):
    """Keep the report as a single S3 object."""

    def __init__(self, bucket: str, key: str, client: Any | None = None) -> None:
        if not bucket:
            raise ReportStoreError("S3 bucket name is not configured.")
        self._bucket = bucket
        self._key = key
        self._client = client or create_boto3_client("s3")

    async def write(self, payload: str) -> None:
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=self._key,
                Body=payload.encode("utf-8"),
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as exc:
            raise ReportStoreError(f"Failed to upload report: {exc}") from exc

    async def read(self) -> Optional[str]:
        try:
            response = await run_in_threadpool(
                self._client.get_object,
                Bucket=self._bucket,
                Key=self._key,
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"NoSuchKey", "404"}:
                return None
            raise ReportStoreError(f"Failed to download report: {exc}") from exc
        except BotoCoreError as exc:
            raise ReportStoreError(f"Failed to download report: {exc}") from exc

        body = await run_in_threadpool(response["Body"].read)
        return body.decode("utf-8")


def build_report_store() -> ReportStore:
    """Pick the configured report backend."""

    if settings.report.backend == "s3":
        return S3ReportStore(settings.report.bucket_name or "", settings.report.object_key)
    return LocalReportStore(settings.report.path)


__all__ = [
    "LocalReportStore",
    "ReportStoreError",
    "S3ReportStore",
    "build_report_store",
]
