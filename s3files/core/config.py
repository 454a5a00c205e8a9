"""
Client Configuration
====================

Immutable configuration for an S3 file manager instance.

Design Principles:
------------------
1. **Immutability**: Frozen dataclass; one instance per client, never mutated
2. **Fail-fast**: Invalid values raise ConfigurationError at construction,
   before any network activity
3. **Defaults**: Default storage class and URL TTL live on the instance,
   not in process-wide state, so per-tenant clients stay independent
4. **Environment**: Optional loading from environment variables

Credentials are optional. When omitted, aioboto3 resolves them from the
ambient chain (environment, shared credentials file, instance role).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from s3files.core import constants as C
from s3files.core.errors import ConfigurationError
from s3files.core.types import StorageClass


@dataclass(frozen=True, slots=True)
class FileManagerConfig:
    """
    S3 file manager configuration.

    Attributes:
        region: AWS region identifier (required).
        bucket_name: Target bucket (required).
        access_key_id: Explicit access key (None for ambient resolution).
        secret_access_key: Explicit secret key (None for ambient resolution).
        session_token: Temporary STS session token.
        endpoint_url: Custom endpoint for MinIO/R2 (None for AWS).
        base_path: Prefix applied to every generated key.
        url_expiration_seconds: Default presigned URL TTL.
        storage_class: Default storage class for uploads.
        max_pool_connections: HTTP connection pool size.
        connect_timeout_seconds: TCP connect timeout.
        read_timeout_seconds: Socket read timeout.
        max_attempts: Transport-level attempts (handled by botocore).
    """
    region: str
    bucket_name: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    endpoint_url: Optional[str] = None
    base_path: str = ""
    url_expiration_seconds: int = C.DEFAULT_URL_EXPIRY_S
    storage_class: StorageClass = StorageClass.INTELLIGENT_TIERING
    max_pool_connections: int = C.DEFAULT_MAX_POOL_CONNECTIONS
    connect_timeout_seconds: int = C.DEFAULT_CONNECT_TIMEOUT_S
    read_timeout_seconds: int = C.DEFAULT_READ_TIMEOUT_S
    max_attempts: int = C.DEFAULT_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        """
        Validate configuration invariants.

        Raises:
            ConfigurationError: If any invariant is violated.
        """
        if not self.region:
            raise ConfigurationError.missing_field("region", "AWS region")
        if not self.bucket_name:
            raise ConfigurationError.missing_field("bucket_name", "S3 bucket name")

        # Credentials come as a pair or not at all
        if bool(self.access_key_id) != bool(self.secret_access_key):
            raise ConfigurationError.invalid_value(
                "access_key_id",
                "<redacted>",
                "access_key_id and secret_access_key must be given together",
            )

        if not 0 < self.url_expiration_seconds <= C.MAX_PRESIGN_EXPIRY_S:
            raise ConfigurationError.invalid_value(
                "url_expiration_seconds",
                self.url_expiration_seconds,
                f"must be between 1 and {C.MAX_PRESIGN_EXPIRY_S}",
            )

        if not isinstance(self.storage_class, StorageClass):
            try:
                object.__setattr__(self, "storage_class", StorageClass(self.storage_class))
            except ValueError:
                raise ConfigurationError.invalid_value(
                    "storage_class", self.storage_class, "unknown storage class"
                ) from None

        if self.max_pool_connections <= 0:
            raise ConfigurationError.invalid_value(
                "max_pool_connections", self.max_pool_connections, "must be > 0"
            )
        if self.connect_timeout_seconds <= 0:
            raise ConfigurationError.invalid_value(
                "connect_timeout_seconds", self.connect_timeout_seconds, "must be > 0"
            )
        if self.read_timeout_seconds <= 0:
            raise ConfigurationError.invalid_value(
                "read_timeout_seconds", self.read_timeout_seconds, "must be > 0"
            )
        if self.max_attempts <= 0:
            raise ConfigurationError.invalid_value(
                "max_attempts", self.max_attempts, "must be > 0"
            )

    @property
    def has_explicit_credentials(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)

    @classmethod
    def from_env(cls, prefix: str = "S3") -> "FileManagerConfig":
        """
        Construct configuration from environment variables.

        Environment Variables:
        - {prefix}_REGION: AWS region (falls back to AWS_REGION)
        - {prefix}_BUCKET: Bucket name (required)
        - {prefix}_BASE_PATH: Key prefix for generated keys
        - {prefix}_ENDPOINT_URL: Custom endpoint URL
        - {prefix}_ACCESS_KEY_ID: Access key (falls back to AWS_ACCESS_KEY_ID)
        - {prefix}_SECRET_ACCESS_KEY: Secret key (falls back to AWS_SECRET_ACCESS_KEY)
        - AWS_SESSION_TOKEN: STS session token
        - {prefix}_URL_EXPIRATION: Default presigned URL TTL in seconds
        - {prefix}_STORAGE_CLASS: Default storage class

        Args:
            prefix: Environment variable prefix.

        Returns:
            FileManagerConfig populated from environment.

        Raises:
            ConfigurationError: If required values are missing or invalid.
        """
        def _get(key: str, default: str = "") -> str:
            return os.environ.get(f"{prefix}_{key}", default)

        def _get_int(key: str, default: int) -> int:
            val = _get(key)
            if not val:
                return default
            try:
                return int(val)
            except ValueError:
                raise ConfigurationError.invalid_value(
                    f"{prefix}_{key}", val, "not an integer"
                ) from None

        access_key_id = _get("ACCESS_KEY_ID") or os.environ.get("AWS_ACCESS_KEY_ID")
        secret_access_key = (
            _get("SECRET_ACCESS_KEY") or os.environ.get("AWS_SECRET_ACCESS_KEY")
        )

        return cls(
            region=_get("REGION") or os.environ.get("AWS_REGION", ""),
            bucket_name=_get("BUCKET"),
            access_key_id=access_key_id or None,
            secret_access_key=secret_access_key or None,
            session_token=os.environ.get("AWS_SESSION_TOKEN") or None,
            endpoint_url=_get("ENDPOINT_URL") or None,
            base_path=_get("BASE_PATH"),
            url_expiration_seconds=_get_int("URL_EXPIRATION", C.DEFAULT_URL_EXPIRY_S),
            storage_class=_get("STORAGE_CLASS") or StorageClass.INTELLIGENT_TIERING,
            max_pool_connections=_get_int(
                "MAX_POOL_CONNECTIONS", C.DEFAULT_MAX_POOL_CONNECTIONS
            ),
            connect_timeout_seconds=_get_int(
                "CONNECT_TIMEOUT", C.DEFAULT_CONNECT_TIMEOUT_S
            ),
            read_timeout_seconds=_get_int("READ_TIMEOUT", C.DEFAULT_READ_TIMEOUT_S),
            max_attempts=_get_int("MAX_ATTEMPTS", C.DEFAULT_MAX_ATTEMPTS),
        )

    def session_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments for aioboto3.Session.

        Empty when credentials are left to ambient resolution.
        """
        kwargs: Dict[str, Any] = {}
        if self.has_explicit_credentials:
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key
        if self.session_token:
            kwargs["aws_session_token"] = self.session_token
        return kwargs

    def client_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments for ``session.client("s3", ...)``.

        Returns:
            Dict including a botocore Config with pool and timeout settings.
        """
        from botocore.config import Config

        kwargs: Dict[str, Any] = {
            "region_name": self.region,
            "config": Config(
                max_pool_connections=self.max_pool_connections,
                connect_timeout=self.connect_timeout_seconds,
                read_timeout=self.read_timeout_seconds,
                retries={"max_attempts": self.max_attempts},
                signature_version="s3v4",
            ),
        }
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        return kwargs

    def __repr__(self) -> str:
        # Never print secrets
        return (
            f"FileManagerConfig(region={self.region!r}, "
            f"bucket_name={self.bucket_name!r}, "
            f"base_path={self.base_path!r}, "
            f"endpoint_url={self.endpoint_url!r}, "
            f"storage_class={self.storage_class.value!r}, "
            f"url_expiration_seconds={self.url_expiration_seconds}, "
            f"explicit_credentials={self.has_explicit_credentials})"
        )


__all__ = ["FileManagerConfig"]
