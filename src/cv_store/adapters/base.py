from abc import ABC, abstractmethod
from typing import List, Optional, Union

from cv_store.config.settings import Settings
from cv_store.schemas import CvFile, CvRecord

CvId = Union[int, str]


class BaseCvAdapter(ABC):
    """Base class for storage backends (local, direct S3, signed-URL S3)"""

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings) -> "BaseCvAdapter":
        """Build the adapter from application settings"""
        pass

    @abstractmethod
    async def add_cv(self, file: CvFile) -> CvId:
        """Store a file and return its id"""
        pass

    @abstractmethod
    async def list_cvs(self) -> List[CvRecord]:
        """Return all stored files"""
        pass

    @abstractmethod
    async def get_cv(self, cv_id: CvId) -> Optional[CvRecord]:
        """Return one file including its content"""
        pass

    @abstractmethod
    async def delete_cv(self, cv_id: CvId) -> bool:
        """Remove a file"""
        pass
