import sqlite3

import pytest

from cv_store.adapters.local import SCHEMA_VERSION, LocalCvAdapter
from cv_store.errors import StorageError
from cv_store.schemas import CvFile

TEST_TXT = CvFile(name="a.txt", content=b"hello world!", type="text/plain")
TEST_PDF = CvFile(
    name="resume.pdf",
    content=b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF",
    type="application/pdf",
)


async def test_schema_created_on_first_open(local_adapter, db_path):
    assert await local_adapter.list_cvs() == []

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='cvs'")
    assert cursor.fetchone() is not None
    cursor.execute("SELECT name FROM sqlite_master WHERE type='index' AND name='idx_cvs_created_at'")
    assert cursor.fetchone() is not None
    assert cursor.execute("PRAGMA user_version").fetchone()[0] == SCHEMA_VERSION
    conn.close()


async def test_reopening_keeps_existing_records(local_adapter, db_path):
    cv_id = await local_adapter.add_cv(TEST_TXT)

    reopened = LocalCvAdapter(db_path)
    records = await reopened.list_cvs()
    assert [r.id for r in records] == [cv_id]


async def test_add_then_get_round_trip(local_adapter):
    cv_id = await local_adapter.add_cv(TEST_PDF)
    assert isinstance(cv_id, int)

    record = await local_adapter.get_cv(cv_id)
    assert record is not None
    assert record.blob == TEST_PDF.content
    assert record.name == "resume.pdf"
    assert record.size == len(TEST_PDF.content)
    assert record.type == "application/pdf"
    assert record.url is None


async def test_upload_twelve_byte_text_file_is_listed(local_adapter):
    await local_adapter.add_cv(TEST_TXT)

    records = await local_adapter.list_cvs()
    assert len(records) == 1
    assert records[0].name == "a.txt"
    assert records[0].size == 12
    assert records[0].blob == b"hello world!"


async def test_listing_adds_exactly_one_record_per_upload(local_adapter):
    first = await local_adapter.add_cv(TEST_TXT)
    before = {r.id for r in await local_adapter.list_cvs()}

    second = await local_adapter.add_cv(TEST_PDF)
    after = [r.id for r in await local_adapter.list_cvs()]

    assert len(after) == len(set(after)) == 2
    assert set(after) - before == {second}
    assert first in after


async def test_list_is_sorted_newest_first(db_path):
    clock = iter([1002.0, 1000.0, 1001.0])
    local_adapter = LocalCvAdapter(db_path, clock=lambda: next(clock))

    for name in ("newest.txt", "oldest.txt", "middle.txt"):
        await local_adapter.add_cv(CvFile(name=name, content=b"x", type="text/plain"))

    records = await local_adapter.list_cvs()
    assert [r.name for r in records] == ["newest.txt", "middle.txt", "oldest.txt"]
    for newer, older in zip(records, records[1:]):
        assert newer.created_at >= older.created_at


async def test_get_missing_returns_none(local_adapter):
    assert await local_adapter.get_cv(999) is None


async def test_delete_is_idempotent(local_adapter):
    cv_id = await local_adapter.add_cv(TEST_TXT)

    assert await local_adapter.delete_cv(cv_id) is True
    assert await local_adapter.list_cvs() == []
    assert await local_adapter.delete_cv(cv_id) is True


async def test_empty_type_is_kept(local_adapter):
    cv_id = await local_adapter.add_cv(CvFile(name="blob", content=b"\x00\x01"))
    record = await local_adapter.get_cv(cv_id)
    assert record.type == ""


async def test_unopenable_database_raises_storage_error(tmp_path):
    adapter = LocalCvAdapter(tmp_path / "missing-dir" / "cvs.db")
    with pytest.raises(StorageError):
        await adapter.list_cvs()
    with pytest.raises(StorageError):
        await adapter.add_cv(TEST_TXT)
