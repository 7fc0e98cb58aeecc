import pytest

from cv_store.adapters.s3_presigned import PresignedS3CvAdapter
from cv_store.config.settings import Settings
from cv_store.errors import DownloadError, ListError, PresignError
from cv_store.schemas import CvFile
from cv_store.server.main import create_app
from tests.consts import TEST_API_BASE_URL, TEST_BUCKET_NAME, TEST_PREFIX, TEST_REGION
from tests.fixtures.signing_stack import SigningStackTransport

TEST_FILE = CvFile(name="r.pdf", content=b"%PDF-1.4 resume", type="application/pdf")


def _adapter(settings, s3_client) -> PresignedS3CvAdapter:
    transport = SigningStackTransport(create_app(settings), s3_client)
    return PresignedS3CvAdapter(api_base_url=TEST_API_BASE_URL, transport=transport)


@pytest.fixture
def app_adapter(mocked_aws, server_settings) -> PresignedS3CvAdapter:
    return _adapter(server_settings, mocked_aws)


async def test_round_trip_through_signing_app(app_adapter, mocked_aws):
    key = await app_adapter.add_cv(TEST_FILE)

    assert key.startswith(TEST_PREFIX)
    assert key.endswith("Z-r.pdf")
    head = mocked_aws.head_object(Bucket=TEST_BUCKET_NAME, Key=key)
    assert head["ContentType"] == "application/pdf"

    records = await app_adapter.list_cvs()
    assert [r.id for r in records] == [key]
    listed = records[0]
    assert listed.name == key[len(TEST_PREFIX):]
    assert listed.size == len(TEST_FILE.content)
    assert listed.type == "application/pdf"
    assert listed.created_at.tzinfo is not None
    assert listed.blob is None

    fetched = await app_adapter.get_cv(key)
    assert fetched.blob == TEST_FILE.content
    assert fetched.type == "application/pdf"
    assert fetched.created_at.tzinfo is not None


async def test_delete_through_signing_app(app_adapter):
    key = await app_adapter.add_cv(TEST_FILE)

    assert await app_adapter.delete_cv(key) is True
    assert await app_adapter.list_cvs() == []
    assert await app_adapter.delete_cv(key) is True


async def test_missing_object_through_signing_app(app_adapter):
    with pytest.raises(DownloadError, match="404"):
        await app_adapter.get_cv(f"{TEST_PREFIX}missing.pdf")


async def test_signing_app_failures_surface_as_typed_errors(mocked_aws):
    adapter = _adapter(Settings(_env_file=None, aws_region=TEST_REGION, s3_bucket="no-such-bucket"), mocked_aws)

    with pytest.raises(ListError, match="500 .*NoSuchBucket"):
        await adapter.list_cvs()
    with pytest.raises(PresignError, match="500"):
        await adapter.get_cv("")
