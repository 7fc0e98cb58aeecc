import pytest
from pydantic import ValidationError

from cv_store.config.settings import Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.storage_backend == "local"
    assert settings.s3_prefix == "cv-uploads/"
    assert settings.port == 8787
    assert settings.presign_expires_seconds == 300
    assert settings.allow_origin == "*"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "Direct")
    monkeypatch.setenv("S3_BUCKET", "env-bucket")
    monkeypatch.setenv("AWS_REGION", "eu-north-1")
    monkeypatch.setenv("API_BASE_URL", "http://signer.example/")

    settings = get_settings()

    assert settings.storage_backend == "s3"
    assert settings.s3_bucket == "env-bucket"
    assert settings.aws_region == "eu-north-1"
    assert settings.api_base_url == "http://signer.example"


def test_unknown_backend_is_left_for_the_factory():
    assert Settings(_env_file=None, storage_backend="ftp").storage_backend == "ftp"


def test_invalid_list_filter_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, s3_list_filter="images")
