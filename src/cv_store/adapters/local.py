"""
Local storage backend keeping CVs in a single SQLite file.

The file holds one table of records keyed by an auto-assigned integer id and an
index on the creation time. The schema version lives in ``PRAGMA user_version``;
tables and indexes are created on first open.
"""

import asyncio
import logging
import sqlite3
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Union

from cv_store.adapters.base import BaseCvAdapter
from cv_store.config.settings import Settings
from cv_store.errors import StorageError
from cv_store.schemas import CvFile, CvRecord

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def init_db(conn: sqlite3.Connection) -> None:
    """Create the CV table and its index if the database is older than SCHEMA_VERSION."""
    version = conn.execute("PRAGMA user_version").fetchone()[0]
    if version >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute('''
            CREATE TABLE IF NOT EXISTS cvs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                size INTEGER NOT NULL,
                type TEXT NOT NULL DEFAULT '',
                created_at REAL NOT NULL,
                blob BLOB NOT NULL
            )
        ''')
        conn.execute('CREATE INDEX IF NOT EXISTS idx_cvs_created_at ON cvs (created_at)')
        conn.execute(f'PRAGMA user_version = {SCHEMA_VERSION}')
    logger.info(f"Initialized CV database schema at version {SCHEMA_VERSION}")


def _row_to_record(row: sqlite3.Row) -> CvRecord:
    return CvRecord(
        id=row["id"],
        name=row["name"],
        size=row["size"],
        type=row["type"],
        created_at=datetime.fromtimestamp(row["created_at"], tz=timezone.utc),
        blob=bytes(row["blob"]),
    )


class LocalCvAdapter(BaseCvAdapter):
    """Handles CV storage in a local SQLite database"""

    def __init__(self, db_path: Union[str, Path] = "cv_store.db", clock: Callable[[], float] = time.time):
        self.db_path = str(db_path)
        self.clock = clock
        logger.info(f"LocalCvAdapter initialized at: {self.db_path}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocalCvAdapter":
        return cls(settings.local_db_path)

    def _open(self) -> sqlite3.Connection:
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            init_db(conn)
            return conn
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            logger.error(f"Error opening database {self.db_path}: {str(e)}")
            raise StorageError(f"Could not open database {self.db_path}: {e}") from e

    def _insert(self, file: CvFile) -> int:
        conn = self._open()
        try:
            with conn:
                cursor = conn.execute(
                    'INSERT INTO cvs (name, size, type, created_at, blob) VALUES (?, ?, ?, ?, ?)',
                    (file.name, file.size, file.type or "", self.clock(), sqlite3.Binary(file.content)),
                )
            return cursor.lastrowid
        except sqlite3.Error as e:
            logger.error(f"Error storing {file.name}: {str(e)}")
            raise StorageError(f"Failed to store {file.name}: {e}") from e
        finally:
            conn.close()

    def _select_all(self) -> List[CvRecord]:
        conn = self._open()
        try:
            rows = conn.execute('SELECT * FROM cvs ORDER BY created_at DESC, id DESC').fetchall()
            return [_row_to_record(row) for row in rows]
        except sqlite3.Error as e:
            logger.error(f"Error listing CVs: {str(e)}")
            raise StorageError(f"Failed to list CVs: {e}") from e
        finally:
            conn.close()

    def _select_one(self, cv_id: int) -> Optional[CvRecord]:
        conn = self._open()
        try:
            row = conn.execute('SELECT * FROM cvs WHERE id = ?', (cv_id,)).fetchone()
            return _row_to_record(row) if row else None
        except sqlite3.Error as e:
            logger.error(f"Error reading CV {cv_id}: {str(e)}")
            raise StorageError(f"Failed to read CV {cv_id}: {e}") from e
        finally:
            conn.close()

    def _delete(self, cv_id: int) -> None:
        conn = self._open()
        try:
            with conn:
                conn.execute('DELETE FROM cvs WHERE id = ?', (cv_id,))
        except sqlite3.Error as e:
            logger.error(f"Error deleting CV {cv_id}: {str(e)}")
            raise StorageError(f"Failed to delete CV {cv_id}: {e}") from e
        finally:
            conn.close()

    async def add_cv(self, file: CvFile) -> int:
        cv_id = await asyncio.to_thread(self._insert, file)
        logger.info(f"Stored {file.name} ({file.size} bytes) as CV {cv_id}")
        return cv_id

    async def list_cvs(self) -> List[CvRecord]:
        return await asyncio.to_thread(self._select_all)

    async def get_cv(self, cv_id: int) -> Optional[CvRecord]:
        """Return the CV or None when the id is unknown."""
        return await asyncio.to_thread(self._select_one, cv_id)

    async def delete_cv(self, cv_id: int) -> bool:
        """Delete the CV. Unknown ids are not an error."""
        await asyncio.to_thread(self._delete, cv_id)
        logger.info(f"Deleted CV {cv_id}")
        return True
