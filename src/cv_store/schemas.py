####################################
# --- Domain and API schemas ---   #
####################################

import mimetypes
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

GENERIC_FILE_TYPE = "file"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_file_type(name: str) -> str:
    """Approximate MIME type from the file extension, ``"file"`` when unknown."""
    guessed, _ = mimetypes.guess_type(name)
    return guessed or GENERIC_FILE_TYPE


class CvFile(BaseModel):
    """A file handed to ``add_cv``: name, raw bytes and MIME type."""
    name: str = Field(description="Original file name.")
    content: bytes = Field(repr=False, description="Raw file content.")
    type: str = Field("", description="MIME type, empty when unknown.")

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CvFile":
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content=path.read_bytes(), type=guessed or "")


class CvRecord(BaseModel):
    """One stored file.

    ``id`` is an auto-assigned integer for the local backend and the full object
    key for the S3 backends. ``created_at`` is the upload time locally and the
    object's last-modified time remotely.
    """
    id: Union[int, str]
    name: str
    size: int = Field(ge=0)
    type: str = GENERIC_FILE_TYPE
    created_at: datetime
    blob: Optional[bytes] = Field(None, repr=False)
    url: Optional[str] = None


class UploadUrlRequest(BaseModel):
    """Request body for `POST /api/upload-url`."""
    name: Optional[str] = None
    type: Optional[str] = None


class UploadUrlResponse(BaseModel):
    """Response model for `POST /api/upload-url`."""
    url: str = Field(description="Signed PUT address.")
    key: str = Field(
        description="Object key the upload will be stored under.",
        json_schema_extra={"example": "cv-uploads/2024-01-01T00-00-00-000Z-resume.pdf"},
    )


class DownloadUrlResponse(BaseModel):
    """Response model for `GET /api/download-url`."""
    url: str = Field(description="Signed GET address.")


class ListItem(BaseModel):
    """One object under the configured prefix."""
    key: str
    name: str
    size: int
    last_modified: datetime = Field(alias="lastModified")

    model_config = ConfigDict(populate_by_name=True)


class ListResponse(BaseModel):
    """Response model for `GET /api/list`."""
    items: List[ListItem]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [
                    {
                        "key": "cv-uploads/2024-01-01T00-00-00-000Z-resume.pdf",
                        "name": "2024-01-01T00-00-00-000Z-resume.pdf",
                        "size": 512,
                        "lastModified": "2024-01-01T00:00:00Z",
                    }
                ]
            }
        }
    )


class DeleteRequest(BaseModel):
    """Request body for `POST /api/delete`."""
    key: Optional[str] = None


class DeleteResponse(BaseModel):
    """Response model for `POST /api/delete`."""
    ok: bool = True
