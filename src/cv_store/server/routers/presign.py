import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse

from cv_store.config.settings import Settings
from cv_store.schemas import (
    DEFAULT_CONTENT_TYPE,
    DeleteRequest,
    DeleteResponse,
    DownloadUrlResponse,
    ListResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)
from cv_store.server.s3.delete_objects import delete_s3_object
from cv_store.server.s3.presign import (
    generate_download_url,
    generate_upload_url,
    make_upload_key,
)
from cv_store.server.s3.read_objects import fetch_prefixed_objects

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure(error: Exception, fallback: str) -> PlainTextResponse:
    message = str(error) or fallback
    logger.error(f"{fallback}: {message}")
    return PlainTextResponse(message, status_code=500)


@router.post("/upload-url", response_model=UploadUrlResponse)
def create_upload_url(request: Request, body: Optional[UploadUrlRequest] = None):
    """
    Issue a signed PUT address for a new CV.

    The key is generated here (prefix + timestamp + name) and returned alongside
    the URL; the client must upload with the same content type.
    """
    settings: Settings = request.app.state.settings
    body = body or UploadUrlRequest()
    try:
        key = make_upload_key(settings.s3_prefix, body.name or "file")
        url = generate_upload_url(
            bucket_name=settings.s3_bucket,
            object_key=key,
            content_type=body.type or DEFAULT_CONTENT_TYPE,
            expires_in=settings.presign_expires_seconds,
            s3_client=request.app.state.s3_client,
        )
        return UploadUrlResponse(url=url, key=key)
    except Exception as e:
        return _failure(e, "presign failed")


@router.get("/download-url", response_model=DownloadUrlResponse)
def create_download_url(
    request: Request,
    key: Optional[str] = Query(None, description="Key of the object to download"),
):
    """Issue a signed GET address for one object."""
    settings: Settings = request.app.state.settings
    try:
        if not key:
            raise ValueError("key is required")
        url = generate_download_url(
            bucket_name=settings.s3_bucket,
            object_key=key,
            expires_in=settings.presign_expires_seconds,
            s3_client=request.app.state.s3_client,
        )
        return DownloadUrlResponse(url=url)
    except Exception as e:
        return _failure(e, "presign failed")


@router.get("/list", response_model=ListResponse)
def list_cvs(request: Request):
    """List the objects under the configured prefix, directory markers excluded."""
    settings: Settings = request.app.state.settings
    try:
        items = fetch_prefixed_objects(
            bucket_name=settings.s3_bucket,
            prefix=settings.s3_prefix,
            s3_client=request.app.state.s3_client,
        )
        return ListResponse(items=items)
    except Exception as e:
        return _failure(e, "list failed")


@router.post("/delete", response_model=DeleteResponse)
def delete_cv(request: Request, body: Optional[DeleteRequest] = None):
    """Delete one object with the backend's own credentials."""
    settings: Settings = request.app.state.settings
    try:
        if body is None or not body.key:
            raise ValueError("key is required")
        delete_s3_object(
            bucket_name=settings.s3_bucket,
            object_key=body.key,
            s3_client=request.app.state.s3_client,
        )
        return DeleteResponse(ok=True)
    except Exception as e:
        return _failure(e, "delete failed")
