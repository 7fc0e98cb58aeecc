"""
S3 backend going through the signing backend.

The backend holds the AWS credentials and hands out short-lived signed URLs;
file bytes travel directly between this client and S3. Expired URLs are not
retried, the caller starts the whole operation again.
"""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional

import httpx
from pydantic import ValidationError

from cv_store.adapters.base import BaseCvAdapter
from cv_store.config.settings import Settings
from cv_store.errors import DeleteError, DownloadError, ListError, PresignError, UploadError
from cv_store.schemas import (
    DEFAULT_CONTENT_TYPE,
    GENERIC_FILE_TYPE,
    CvFile,
    CvRecord,
    DownloadUrlResponse,
    ListResponse,
    UploadUrlResponse,
    guess_file_type,
)

logger = logging.getLogger(__name__)


def _parse_http_date(value: Optional[str]) -> datetime:
    if value:
        try:
            return parsedate_to_datetime(value)
        except (TypeError, ValueError):
            pass
    return datetime.now(timezone.utc)


class PresignedS3CvAdapter(BaseCvAdapter):
    """Handles CVs in S3 using signed URLs issued by the signing backend"""

    def __init__(
        self,
        api_base_url: str = "http://localhost:8787",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        logger.info(f"PresignedS3CvAdapter initialized with backend: {self.api_base_url}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PresignedS3CvAdapter":
        return cls(api_base_url=settings.api_base_url, timeout=settings.http_timeout)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def add_cv(self, file: CvFile) -> str:
        content_type = file.type or DEFAULT_CONTENT_TYPE
        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self.api_base_url}/api/upload-url",
                    json={"name": file.name, "type": content_type},
                )
                response.raise_for_status()
                signed = UploadUrlResponse.model_validate(response.json())
            except (httpx.HTTPError, ValueError, ValidationError) as e:
                logger.error(f"Error requesting upload URL for {file.name}: {str(e)}")
                raise PresignError(f"Failed to get upload URL: {_describe(e)}") from e

            try:
                put_response = await client.put(
                    signed.url,
                    content=file.content,
                    headers={"Content-Type": content_type},
                )
                put_response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Error uploading {file.name} to signed URL: {str(e)}")
                raise UploadError(f"Upload failed: {_describe(e)}") from e

        logger.info(f"Uploaded {file.name} as {signed.key}")
        return signed.key

    async def list_cvs(self) -> List[CvRecord]:
        try:
            async with self._client() as client:
                response = await client.get(f"{self.api_base_url}/api/list")
                response.raise_for_status()
            listing = ListResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"Error listing CVs: {str(e)}")
            raise ListError(f"Failed to list CVs: {_describe(e)}") from e

        return [
            CvRecord(
                id=item.key,
                name=item.name,
                size=max(item.size, 0),
                type=guess_file_type(item.name),
                created_at=item.last_modified,
            )
            for item in listing.items
        ]

    async def get_cv(self, cv_id: str) -> CvRecord:
        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self.api_base_url}/api/download-url",
                    params={"key": cv_id},
                )
                response.raise_for_status()
                signed = DownloadUrlResponse.model_validate(response.json())
            except (httpx.HTTPError, ValueError, ValidationError) as e:
                logger.error(f"Error requesting download URL for {cv_id}: {str(e)}")
                raise PresignError(f"Failed to get download URL: {_describe(e)}") from e

            try:
                download = await client.get(signed.url)
                download.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Error downloading {cv_id}: {str(e)}")
                raise DownloadError(f"Download failed: {_describe(e)}") from e

        content = download.content
        return CvRecord(
            id=cv_id,
            name=cv_id.split("/")[-1],
            size=len(content),
            type=download.headers.get("content-type", GENERIC_FILE_TYPE),
            created_at=_parse_http_date(download.headers.get("last-modified")),
            blob=content,
        )

    async def delete_cv(self, cv_id: str) -> bool:
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.api_base_url}/api/delete",
                    json={"key": cv_id},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error deleting {cv_id}: {str(e)}")
            raise DeleteError(f"Delete failed: {_describe(e)}") from e

        logger.info(f"Deleted {cv_id}")
        return True


def _describe(error: Exception) -> str:
    """Prefer the backend's plain-text message over httpx's generic status text."""
    if isinstance(error, httpx.HTTPStatusError):
        body = error.response.text.strip()
        return f"{error.response.status_code} {body}" if body else str(error.response.status_code)
    return str(error)
