"""UI controller: turns user actions into storage calls and keeps the list to render."""

import logging
import math
from typing import List, Optional

from cv_store.adapters.base import CvId
from cv_store.errors import CvStoreError
from cv_store.schemas import GENERIC_FILE_TYPE, CvFile, CvRecord
from cv_store.storage import CvStorage

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No CVs uploaded yet."
LOADING_MESSAGE = "Loading..."

SAMPLE_CVS = [
    (
        "John-Doe-CV.txt",
        "John Doe\nSenior Software Engineer\nSkills: React, Node.js, PostgreSQL, AWS\n"
        "Experience: 8+ years building web apps.",
    ),
    (
        "Jane-Smith-Resume.txt",
        "Jane Smith\nProduct Manager\nSkills: Roadmapping, Analytics, UX, A/B Testing\n"
        "Experience: 6+ years in product-led startups.",
    ),
    (
        "Alex-UX-Portfolio.txt",
        "Alex Kim\nUX Designer\nSkills: Figma, Prototyping, User Research\n"
        "Experience: 5+ years, fintech and healthtech.",
    ),
]


def format_bytes(num_bytes) -> str:
    """Human-readable size, e.g. ``1536 -> '1.50 KB'``."""
    if isinstance(num_bytes, bool) or not isinstance(num_bytes, (int, float)) or not math.isfinite(num_bytes):
        return ""
    units = ["B", "KB", "MB", "GB"]
    size = float(num_bytes)
    unit_idx = 0
    while size >= 1024 and unit_idx < len(units) - 1:
        size /= 1024
        unit_idx += 1
    decimals = 0 if size >= 100 else 1 if size >= 10 else 2
    return f"{size:.{decimals}f} {units[unit_idx]}"


def format_record(record: CvRecord) -> str:
    created = record.created_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"[{record.id}] {record.name} · {format_bytes(record.size)} · "
        f"{created} · {record.type or GENERIC_FILE_TYPE}"
    )


class CvController:
    """
    Drives the storage facade from user actions.

    Every storage failure is caught here and stored in ``error``; ``items`` is only
    replaced after a call succeeds, so a failure never leaves a half-updated list.
    """

    def __init__(self, storage: CvStorage):
        self.storage = storage
        self.items: List[CvRecord] = []
        self.error = ""
        self.is_loading = True

    def _fail(self, prefix: str, exc: CvStoreError) -> None:
        self.error = f"{prefix}: {exc}" if str(exc) else prefix
        logger.error(self.error)

    async def refresh(self) -> bool:
        try:
            self.items = await self.storage.list_cvs()
            return True
        except CvStoreError as e:
            self._fail("Failed to load CVs", e)
            return False
        finally:
            self.is_loading = False

    async def upload(self, file: CvFile) -> Optional[CvId]:
        self.error = ""
        try:
            cv_id = await self.storage.add_cv(file)
        except CvStoreError as e:
            self._fail("Upload failed", e)
            return None
        await self.refresh()
        return cv_id

    async def add_samples(self) -> List[CvId]:
        self.error = ""
        ids = []
        try:
            for name, content in SAMPLE_CVS:
                sample = CvFile(name=name, content=content.encode("utf-8"), type="text/plain")
                ids.append(await self.storage.add_cv(sample))
        except CvStoreError as e:
            self._fail("Failed to add sample CVs", e)
            return ids
        await self.refresh()
        return ids

    async def delete(self, cv_id: CvId) -> bool:
        self.error = ""
        try:
            await self.storage.delete_cv(cv_id)
        except CvStoreError as e:
            self._fail("Delete failed", e)
            return False
        self.items = [r for r in self.items if r.id != cv_id]
        return True

    async def download(self, cv_id: CvId) -> Optional[CvRecord]:
        """Fetch a CV with its content; None when it does not exist or the fetch failed."""
        self.error = ""
        try:
            return await self.storage.get_cv(cv_id)
        except CvStoreError as e:
            self._fail("Download failed", e)
            return None

    def render(self) -> List[str]:
        if self.is_loading:
            return [LOADING_MESSAGE]
        if not self.items:
            return [EMPTY_MESSAGE]
        return [format_record(r) for r in self.items]
