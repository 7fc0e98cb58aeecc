"""Exceptions raised by the storage adapters.

Every failure an adapter can surface derives from :class:`CvStoreError`, so the
UI layer can catch the whole family in one place and show ``str(error)``.
"""


class CvStoreError(Exception):
    """Base class for all storage failures."""


class PresignError(CvStoreError):
    """The signing backend could not issue a signed URL."""


class UploadError(CvStoreError):
    """Writing the file content to storage failed."""


class DownloadError(CvStoreError):
    """Fetching the file content failed or returned a non-success status."""


class ListError(CvStoreError):
    """Listing the stored files failed."""


class StorageError(CvStoreError):
    """The local database could not be opened or a transaction aborted."""


class DeleteError(CvStoreError):
    """Deleting a file failed."""


class DeleteBlockedError(DeleteError):
    """The delete request never reached the server (network or cross-origin block)."""


class DeleteForbiddenError(DeleteError):
    """The server refused the delete (bucket policy does not grant it)."""


class DeleteDisabledError(DeleteError):
    """Delete is switched off for this deployment."""
