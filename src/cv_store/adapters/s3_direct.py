"""
S3 backend talking straight to a bucket's public HTTPS surface.

No AWS credentials are used. Listing and download need a bucket policy that
allows anonymous ListBucket and GetObject; upload and delete only work when the
policy also grants anonymous PutObject / DeleteObject.
"""

import logging
import time
from datetime import datetime, timezone
from typing import List, Optional, Union
from urllib.parse import quote, unquote

import httpx
from lxml import etree

from cv_store.adapters.base import BaseCvAdapter
from cv_store.config.settings import Settings
from cv_store.errors import (
    DeleteBlockedError,
    DeleteDisabledError,
    DeleteError,
    DeleteForbiddenError,
    DownloadError,
    ListError,
    UploadError,
)
from cv_store.schemas import (
    DEFAULT_CONTENT_TYPE,
    GENERIC_FILE_TYPE,
    CvFile,
    CvRecord,
    guess_file_type,
)

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "cv-upload-bucket1"
DEFAULT_REGION = "eu-north-1"
MAX_LIST_KEYS = 1000
UPLOAD_KEY_PREFIX = "uploads/"
DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt", ".rtf", ".png", ".jpg", ".jpeg")


def build_object_url(base_url: str, key: str) -> str:
    """Map an object key to its public address, keeping `/` separators readable."""
    return f"{base_url}/{quote(key, safe='/')}"


def object_name(key: str) -> str:
    """URL-decoded last path segment of a key."""
    return unquote(key.split("/")[-1] or key)


def _extension(name: str) -> str:
    dot = name.rfind(".")
    return name[dot:].lower() if dot != -1 else ""


def _parse_last_modified(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _listing_parser() -> etree.XMLParser:
    # DTDs and entities stay unresolved
    return etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)


def _text(element, name: str) -> str:
    # ListBucketResult carries the S3 namespace, match on local names only
    return element.xpath(f"string(./*[local-name()='{name}'])").strip()


def parse_list_objects(body: Union[str, bytes], base_url: str) -> List[CvRecord]:
    """Turn a ListObjectsV2 XML body into records, skipping directory markers."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    root = etree.fromstring(body, parser=_listing_parser())

    records = []
    for contents in root.xpath("//*[local-name()='Contents']"):
        key = _text(contents, "Key")
        if not key or key.endswith("/"):
            continue

        try:
            size = int(_text(contents, "Size") or "0")
        except ValueError:
            size = 0

        name = object_name(key)
        records.append(CvRecord(
            id=key,
            name=name,
            size=max(size, 0),
            type=guess_file_type(name),
            created_at=_parse_last_modified(_text(contents, "LastModified")),
            url=build_object_url(base_url, key),
        ))
    return records


def filter_records(records: List[CvRecord], list_filter: str = "documents", dedupe: bool = True) -> List[CvRecord]:
    """Apply a listing profile: `documents`, `pdf` or `all`, optionally dropping repeated ids."""
    if list_filter == "documents":
        records = [r for r in records if _extension(r.name) in DOCUMENT_EXTENSIONS]
    elif list_filter == "pdf":
        records = [r for r in records if _extension(r.name) == ".pdf"]

    if dedupe:
        seen = set()
        unique = []
        for record in records:
            if record.id in seen:
                continue
            seen.add(record.id)
            unique.append(record)
        records = unique
    return records


class DirectS3CvAdapter(BaseCvAdapter):
    """Handles CVs in a public S3 bucket without credentials"""

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        base_url: Optional[str] = None,
        list_prefix: str = "",
        list_filter: str = "documents",
        dedupe: bool = True,
        delete_enabled: bool = True,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bucket = bucket or DEFAULT_BUCKET
        self.region = region or DEFAULT_REGION
        # Regional virtual-hosted-style address
        self.base_url = (base_url or f"https://{self.bucket}.s3.{self.region}.amazonaws.com").rstrip("/")
        self.list_prefix = list_prefix
        self.list_filter = list_filter
        self.dedupe = dedupe
        self.delete_enabled = delete_enabled
        self.timeout = timeout
        self.transport = transport

        logger.info("DirectS3CvAdapter initialized")
        logger.info(f"  Base URL: {self.base_url}")
        logger.info(f"  Delete enabled: {self.delete_enabled}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "DirectS3CvAdapter":
        return cls(
            bucket=settings.s3_bucket,
            region=settings.aws_region,
            base_url=settings.s3_public_base_url,
            list_prefix=settings.s3_list_prefix,
            list_filter=settings.s3_list_filter,
            dedupe=settings.s3_list_dedupe,
            delete_enabled=settings.s3_delete_enabled,
            timeout=settings.http_timeout,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def object_url(self, key: str) -> str:
        return build_object_url(self.base_url, key)

    async def list_cvs(self) -> List[CvRecord]:
        """Single unauthenticated ListObjectsV2 call, capped at MAX_LIST_KEYS items."""
        params = {"list-type": "2"}
        if self.list_prefix:
            params["prefix"] = self.list_prefix
        params["max-keys"] = str(MAX_LIST_KEYS)

        logger.info(f"Fetching S3 objects from: {self.base_url}")
        try:
            async with self._client() as client:
                response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching S3 objects: {str(e)}")
            raise ListError(f"S3 list failed: {e}") from e

        if not response.is_success:
            logger.error(f"Failed to list S3 objects: {response.status_code} {response.reason_phrase}")
            raise ListError(f"S3 list failed: {response.status_code}")

        try:
            records = parse_list_objects(response.content, self.base_url)
        except etree.XMLSyntaxError as e:
            logger.error(f"Malformed S3 listing: {str(e)}")
            raise ListError(f"S3 list failed: malformed response ({e})") from e

        records = filter_records(records, self.list_filter, self.dedupe)
        logger.debug(f"Parsed {len(records)} S3 objects")
        return records

    async def get_cv(self, cv_id: str) -> CvRecord:
        url = self.object_url(cv_id)
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Error downloading {cv_id}: {str(e)}")
            raise DownloadError(f"S3 download failed: {e}") from e

        if not response.is_success:
            logger.error(f"Failed to download {cv_id}: {response.status_code} {response.reason_phrase}")
            raise DownloadError(f"S3 download failed: {response.status_code}")

        content = response.content
        return CvRecord(
            id=cv_id,
            name=object_name(cv_id),
            size=len(content),
            type=response.headers.get("content-type", GENERIC_FILE_TYPE),
            created_at=datetime.now(timezone.utc),
            blob=content,
        )

    async def add_cv(self, file: CvFile) -> str:
        """Upload to `uploads/<epoch ms>-<name>`; needs a bucket allowing anonymous PUT."""
        key = f"{UPLOAD_KEY_PREFIX}{int(time.time() * 1000)}-{file.name}"
        try:
            async with self._client() as client:
                response = await client.put(
                    self.object_url(key),
                    content=file.content,
                    headers={"Content-Type": file.type or DEFAULT_CONTENT_TYPE},
                )
        except httpx.HTTPError as e:
            logger.error(f"Error uploading {file.name}: {str(e)}")
            raise UploadError(f"Upload failed: {e}") from e

        if not response.is_success:
            raise UploadError(f"Upload failed: {response.status_code} {response.reason_phrase}")

        logger.info(f"Uploaded {file.name} to S3 as {key}")
        return key

    async def delete_cv(self, cv_id: str) -> bool:
        if not self.delete_enabled:
            raise DeleteDisabledError("Delete is disabled: this bucket does not grant anonymous delete")

        url = self.object_url(cv_id)
        logger.info(f"Attempting to delete: {url}")
        try:
            async with self._client() as client:
                response = await client.delete(url)
        except httpx.TransportError as e:
            logger.error(f"Delete request for {cv_id} never reached S3: {str(e)}")
            raise DeleteBlockedError(
                "Delete request was blocked before reaching S3. Check the network and that "
                "the bucket CORS configuration allows the DELETE method."
            ) from e

        if response.status_code == 403:
            logger.error(f"Delete refused for {cv_id}: {response.text}")
            raise DeleteForbiddenError(
                "Delete refused by S3 (403): the bucket policy must grant s3:DeleteObject."
            )
        if not response.is_success:
            logger.error(f"Delete failed response: {response.text}")
            raise DeleteError(
                f"Delete failed: {response.status_code} {response.reason_phrase} - {response.text}"
            )

        logger.info(f"Deleted {cv_id}")
        return True
