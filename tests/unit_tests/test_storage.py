import logging

import pytest

from cv_store.adapters.base import BaseCvAdapter
from cv_store.adapters.local import LocalCvAdapter
from cv_store.adapters.s3_direct import DirectS3CvAdapter
from cv_store.adapters.s3_presigned import PresignedS3CvAdapter
from cv_store.config.settings import Settings
from cv_store.schemas import CvFile
from cv_store.storage import DEFAULT_BACKEND, create_storage


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


@pytest.mark.parametrize(
    "backend, adapter_class",
    [
        ("local", LocalCvAdapter),
        ("s3", DirectS3CvAdapter),
        ("presigned", PresignedS3CvAdapter),
        ("IndexedDB", LocalCvAdapter),
        ("signed", PresignedS3CvAdapter),
    ],
)
def test_create_storage_selects_configured_adapter(backend, adapter_class, tmp_path):
    storage = create_storage(_settings(storage_backend=backend, local_db_path=str(tmp_path / "cvs.db")))
    assert isinstance(storage.adapter, adapter_class)


def test_unknown_backend_falls_back_to_default(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="cv_store.storage"):
        storage = create_storage(_settings(storage_backend="ftp", local_db_path=str(tmp_path / "cvs.db")))

    assert storage.backend == DEFAULT_BACKEND
    assert isinstance(storage.adapter, LocalCvAdapter)
    assert "ftp" in caplog.text


def test_storage_is_immutable(tmp_path):
    storage = create_storage(_settings(local_db_path=str(tmp_path / "cvs.db")))
    with pytest.raises(AttributeError):
        storage.backend = "s3"


def test_adapters_pick_up_settings():
    settings = _settings(
        storage_backend="s3",
        s3_bucket="my-bucket",
        aws_region="eu-west-1",
        s3_list_filter="PDF",
        s3_delete_enabled=False,
    )
    adapter = create_storage(settings).adapter

    assert adapter.base_url == "https://my-bucket.s3.eu-west-1.amazonaws.com"
    assert adapter.list_filter == "pdf"
    assert adapter.delete_enabled is False


async def test_facade_delegates_to_adapter(tmp_path):
    storage = create_storage(_settings(local_db_path=str(tmp_path / "cvs.db")))
    file = CvFile(name="a.txt", content=b"hello world!", type="text/plain")

    cv_id = await storage.add_cv(file)
    assert [r.id for r in await storage.list_cvs()] == [cv_id]
    assert (await storage.get_cv(cv_id)).blob == file.content
    assert await storage.delete_cv(cv_id) is True
    assert await storage.get_cv(cv_id) is None


def test_adapter_without_from_settings_cannot_be_instantiated():
    class NoFactoryAdapter(BaseCvAdapter):
        async def add_cv(self, file):
            return 1

        async def list_cvs(self):
            return []

        async def get_cv(self, cv_id):
            return None

        async def delete_cv(self, cv_id):
            return True

    with pytest.raises(TypeError, match="from_settings"):
        NoFactoryAdapter()
