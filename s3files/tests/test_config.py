"""
Unit Tests: Configuration and Errors

Tests:
    - Required fields and validation
    - Environment loading
    - aioboto3 argument building
    - Error serialization and not-found classification
"""

import pytest
from botocore.config import Config
from botocore.exceptions import ClientError

from s3files.core.config import FileManagerConfig
from s3files.core.errors import (
    ConfigurationError,
    ErrorCode,
    NotConnectedError,
    error_code_of,
    is_not_found,
)
from s3files.core.types import StorageClass

ENV_VARS = [
    "S3_REGION", "AWS_REGION", "S3_BUCKET", "S3_BASE_PATH", "S3_ENDPOINT_URL",
    "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY", "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN", "S3_URL_EXPIRATION",
    "S3_STORAGE_CLASS", "S3_MAX_POOL_CONNECTIONS", "S3_CONNECT_TIMEOUT",
    "S3_READ_TIMEOUT", "S3_MAX_ATTEMPTS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestValidation:
    """Tests for construction-time validation."""

    def test_defaults(self):
        config = FileManagerConfig(region="us-east-1", bucket_name="b")
        assert config.base_path == ""
        assert config.url_expiration_seconds == 3600
        assert config.storage_class is StorageClass.INTELLIGENT_TIERING
        assert not config.has_explicit_credentials

    def test_missing_region(self):
        with pytest.raises(ConfigurationError, match="AWS region is required"):
            FileManagerConfig(region="", bucket_name="b")

    def test_missing_bucket(self):
        with pytest.raises(ConfigurationError, match="S3 bucket name is required") as exc_info:
            FileManagerConfig(region="us-east-1", bucket_name="")
        assert exc_info.value.code is ErrorCode.CONFIG_MISSING_FIELD

    def test_half_credentials(self):
        with pytest.raises(ConfigurationError):
            FileManagerConfig(region="r", bucket_name="b", access_key_id="AKIA")

    @pytest.mark.parametrize("ttl", [0, -1, 604801])
    def test_ttl_bounds(self, ttl):
        with pytest.raises(ConfigurationError):
            FileManagerConfig(region="r", bucket_name="b", url_expiration_seconds=ttl)

    def test_storage_class_from_string(self):
        config = FileManagerConfig(region="r", bucket_name="b", storage_class="STANDARD_IA")
        assert config.storage_class is StorageClass.STANDARD_IA

    def test_unknown_storage_class(self):
        with pytest.raises(ConfigurationError):
            FileManagerConfig(region="r", bucket_name="b", storage_class="COLD")

    @pytest.mark.parametrize("field", [
        "max_pool_connections", "connect_timeout_seconds",
        "read_timeout_seconds", "max_attempts",
    ])
    def test_non_positive_transport_values(self, field):
        with pytest.raises(ConfigurationError):
            FileManagerConfig(region="r", bucket_name="b", **{field: 0})

    def test_frozen(self):
        config = FileManagerConfig(region="r", bucket_name="b")
        with pytest.raises(AttributeError):
            config.bucket_name = "other"

    def test_repr_hides_secrets(self):
        config = FileManagerConfig(
            region="r", bucket_name="b",
            access_key_id="AKIASECRETID", secret_access_key="very-secret",
        )
        text = repr(config)
        assert "AKIASECRETID" not in text
        assert "very-secret" not in text
        assert "explicit_credentials=True" in text


class TestFromEnv:
    """Tests for environment loading."""

    def test_reads_prefixed_variables(self, clean_env):
        clean_env.setenv("S3_REGION", "eu-central-1")
        clean_env.setenv("S3_BUCKET", "media")
        clean_env.setenv("S3_BASE_PATH", "uploads")
        clean_env.setenv("S3_ENDPOINT_URL", "http://minio:9000")
        clean_env.setenv("S3_URL_EXPIRATION", "600")
        clean_env.setenv("S3_STORAGE_CLASS", "STANDARD")
        config = FileManagerConfig.from_env()
        assert config.region == "eu-central-1"
        assert config.bucket_name == "media"
        assert config.base_path == "uploads"
        assert config.endpoint_url == "http://minio:9000"
        assert config.url_expiration_seconds == 600
        assert config.storage_class is StorageClass.STANDARD

    def test_falls_back_to_aws_variables(self, clean_env):
        clean_env.setenv("AWS_REGION", "us-west-2")
        clean_env.setenv("S3_BUCKET", "media")
        clean_env.setenv("AWS_ACCESS_KEY_ID", "AKIA")
        clean_env.setenv("AWS_SECRET_ACCESS_KEY", "secret")
        clean_env.setenv("AWS_SESSION_TOKEN", "token")
        config = FileManagerConfig.from_env()
        assert config.region == "us-west-2"
        assert config.session_kwargs() == {
            "aws_access_key_id": "AKIA",
            "aws_secret_access_key": "secret",
            "aws_session_token": "token",
        }

    def test_custom_prefix(self, clean_env):
        clean_env.setenv("MEDIA_REGION", "r")
        clean_env.setenv("MEDIA_BUCKET", "b")
        assert FileManagerConfig.from_env(prefix="MEDIA").bucket_name == "b"

    def test_missing_bucket(self, clean_env):
        clean_env.setenv("S3_REGION", "r")
        with pytest.raises(ConfigurationError):
            FileManagerConfig.from_env()

    def test_non_integer(self, clean_env):
        clean_env.setenv("S3_REGION", "r")
        clean_env.setenv("S3_BUCKET", "b")
        clean_env.setenv("S3_READ_TIMEOUT", "soon")
        with pytest.raises(ConfigurationError, match="S3_READ_TIMEOUT"):
            FileManagerConfig.from_env()


class TestClientArguments:
    """Tests for aioboto3 argument building."""

    def test_ambient_credentials(self):
        config = FileManagerConfig(region="r", bucket_name="b")
        assert config.session_kwargs() == {}

    def test_client_kwargs(self):
        config = FileManagerConfig(
            region="eu-west-1", bucket_name="b",
            max_pool_connections=32, connect_timeout_seconds=2,
            read_timeout_seconds=30, max_attempts=5,
        )
        kwargs = config.client_kwargs()
        assert kwargs["region_name"] == "eu-west-1"
        assert "endpoint_url" not in kwargs
        botocore_config = kwargs["config"]
        assert isinstance(botocore_config, Config)
        assert botocore_config.max_pool_connections == 32
        assert botocore_config.connect_timeout == 2
        assert botocore_config.read_timeout == 30
        assert botocore_config.retries == {"max_attempts": 5}
        assert botocore_config.signature_version == "s3v4"

    def test_endpoint_url(self):
        config = FileManagerConfig(region="r", bucket_name="b", endpoint_url="http://x:9000")
        assert config.client_kwargs()["endpoint_url"] == "http://x:9000"


class TestErrors:
    """Tests for the error hierarchy."""

    def test_to_dict(self):
        error = NotConnectedError.for_operation("upload")
        data = error.to_dict()
        assert data["code"] == "CLIENT_NOT_CONNECTED"
        assert data["code_value"] == 3001
        assert data["context"] == {"operation": "upload"}
        assert str(error) == "[CLIENT_NOT_CONNECTED] Cannot upload: client is not connected"

    @pytest.mark.parametrize("code,expected", [
        ("NoSuchKey", True),
        ("404", True),
        ("NotFound", True),
        ("AccessDenied", False),
        ("NoSuchBucket", False),
    ])
    def test_is_not_found(self, code, expected):
        error = ClientError({"Error": {"Code": code, "Message": "m"}}, "GetObject")
        assert error_code_of(error) == code
        assert is_not_found(error) is expected

    def test_non_client_error(self):
        assert error_code_of(ValueError("x")) is None
        assert not is_not_found(ValueError("x"))
