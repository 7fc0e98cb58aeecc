"""
Storage facade: picks one backend from configuration and exposes its four CV
operations under stable names.

The facade is built once at startup with :func:`create_storage` and handed to
whatever drives the UI. There is no fallback between backends at runtime, no
retry and no caching.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from cv_store.adapters.base import BaseCvAdapter, CvId
from cv_store.adapters.local import LocalCvAdapter
from cv_store.adapters.s3_direct import DirectS3CvAdapter
from cv_store.adapters.s3_presigned import PresignedS3CvAdapter
from cv_store.config.settings import Settings, get_settings
from cv_store.schemas import CvFile, CvRecord
from cv_store.utils.decorators import async_log_execution_time

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "local"

ADAPTERS: Dict[str, Type[BaseCvAdapter]] = {
    "local": LocalCvAdapter,
    "s3": DirectS3CvAdapter,
    "presigned": PresignedS3CvAdapter,
}


@dataclass(frozen=True)
class CvStorage:
    """The active backend, fixed for the lifetime of the process."""
    backend: str
    adapter: BaseCvAdapter

    @async_log_execution_time
    async def add_cv(self, file: CvFile) -> CvId:
        return await self.adapter.add_cv(file)

    @async_log_execution_time
    async def list_cvs(self) -> List[CvRecord]:
        return await self.adapter.list_cvs()

    @async_log_execution_time
    async def get_cv(self, cv_id: CvId) -> Optional[CvRecord]:
        return await self.adapter.get_cv(cv_id)

    @async_log_execution_time
    async def delete_cv(self, cv_id: CvId) -> bool:
        return await self.adapter.delete_cv(cv_id)


def resolve_backend(name: Optional[str]) -> str:
    """Return a known backend name, falling back to DEFAULT_BACKEND."""
    if name in ADAPTERS:
        return name
    logger.warning(f"Unknown storage backend '{name}', falling back to '{DEFAULT_BACKEND}'")
    return DEFAULT_BACKEND


def create_storage(settings: Optional[Settings] = None) -> CvStorage:
    """Build the storage facade for the configured backend."""
    settings = settings or get_settings()
    backend = resolve_backend(settings.storage_backend)
    adapter = ADAPTERS[backend].from_settings(settings)
    logger.info(f"Storage initialized with {backend} backend")
    return CvStorage(backend=backend, adapter=adapter)
