"""Shared fixtures for the cv-store test suite."""
import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from cv_store.adapters.local import LocalCvAdapter
from cv_store.adapters.s3_direct import DirectS3CvAdapter
from cv_store.adapters.s3_presigned import PresignedS3CvAdapter
from cv_store.config.settings import Settings, get_settings
from cv_store.server.main import create_app
from tests.consts import (
    TEST_API_BASE_URL,
    TEST_BUCKET_HOST,
    TEST_BUCKET_NAME,
    TEST_PREFIX,
    TEST_REGION,
)
from tests.fixtures.fake_s3 import FakeS3


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)


@pytest.fixture
def mocked_aws(aws_credentials):
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client


@pytest.fixture
def server_settings() -> Settings:
    return Settings(
        _env_file=None,
        aws_region=TEST_REGION,
        s3_bucket=TEST_BUCKET_NAME,
        s3_prefix=TEST_PREFIX,
    )


@pytest.fixture
def client(mocked_aws, server_settings):
    app = create_app(server_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "cvs.db"


@pytest.fixture
def local_adapter(db_path) -> LocalCvAdapter:
    return LocalCvAdapter(db_path)


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def direct_adapter(fake_s3) -> DirectS3CvAdapter:
    return DirectS3CvAdapter(
        base_url=f"https://{TEST_BUCKET_HOST}",
        transport=fake_s3.transport(),
    )


@pytest.fixture
def presigned_adapter(fake_s3) -> PresignedS3CvAdapter:
    return PresignedS3CvAdapter(api_base_url=TEST_API_BASE_URL, transport=fake_s3.transport())
