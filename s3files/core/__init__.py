"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for the file manager:
- Frozen value objects for uploads, downloads and listings
- Error hierarchy for errors raised by this layer
- Immutable client configuration with validation
"""

from s3files.core.types import (
    StorageClass,
    DownloadMode,
    Disposition,
    FileInput,
    UploadOptions,
    UploadResult,
    SignedUrlOptions,
    CopyOptions,
    ListOptions,
    ListEntry,
    ListPage,
    ObjectInfo,
    BufferDownload,
    StreamDownload,
)
from s3files.core.errors import (
    ErrorCode,
    FileManagerError,
    ConfigurationError,
    InvalidFileInputError,
    InvalidArgumentError,
    NotConnectedError,
    is_not_found,
)
from s3files.core.config import FileManagerConfig

__all__ = [
    "StorageClass",
    "DownloadMode",
    "Disposition",
    "FileInput",
    "UploadOptions",
    "UploadResult",
    "SignedUrlOptions",
    "CopyOptions",
    "ListOptions",
    "ListEntry",
    "ListPage",
    "ObjectInfo",
    "BufferDownload",
    "StreamDownload",
    "ErrorCode",
    "FileManagerError",
    "ConfigurationError",
    "InvalidFileInputError",
    "InvalidArgumentError",
    "NotConnectedError",
    "is_not_found",
    "FileManagerConfig",
]
