"""
Storage Module: S3 File Operations
==================================

Provides:
- Key building and name resolution for uploads
- Adapters from caller-side file objects to FileInput
- S3FileManager over an aioboto3 client
- InMemoryS3Client for development and testing
- Factory function for manager construction

Example:
    >>> # Development (in-memory)
    >>> fm = create_file_manager(config, in_memory=True)

    >>> # Production (aioboto3)
    >>> fm = create_file_manager(config)
    >>> await fm.connect()
"""

from __future__ import annotations

from s3files.core.config import FileManagerConfig
from s3files.storage.adapters import from_multipart_file, from_upload_file
from s3files.storage.keys import (
    ResolvedKey,
    build_key,
    file_extension,
    generate_unique_name,
    resolve_key,
)
from s3files.storage.memory import InMemoryS3Client
from s3files.storage.s3_store import S3FileManager, content_disposition
from s3files.storage.streaming import ObjectStream


def create_file_manager(
    config: FileManagerConfig,
    in_memory: bool = False,
) -> S3FileManager:
    """
    Create a file manager.

    Args:
        config: Validated configuration.
        in_memory: Back the manager with an InMemoryS3Client restricted
            to ``config.bucket_name`` instead of a real S3 client.

    Returns:
        S3FileManager. With ``in_memory`` it is usable immediately;
        otherwise call ``connect()`` first.
    """
    if in_memory:
        return S3FileManager(
            config,
            client=InMemoryS3Client(buckets=[config.bucket_name], region=config.region),
        )
    return S3FileManager(config)


__all__ = [
    "ResolvedKey",
    "build_key",
    "file_extension",
    "generate_unique_name",
    "resolve_key",
    "from_multipart_file",
    "from_upload_file",
    "ObjectStream",
    "InMemoryS3Client",
    "S3FileManager",
    "content_disposition",
    "create_file_manager",
]
