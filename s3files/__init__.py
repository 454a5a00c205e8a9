"""
s3files: Typed File Operations over S3-Compatible Object Stores

- Deterministic, collision-free object keys from upload intent
- Adapters for multipart-form and async-read file objects
- Upload, buffered or streamed download, existence checks
- Idempotent single and batch deletes, server-side copy and move
- Cursor-paginated listing and presigned retrieval URLs

Works with AWS S3, MinIO, Cloudflare R2 and other S3-compatible stores
through aioboto3.

License: MIT
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from s3files.core.types import (
    StorageClass,
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
    FileManagerError,
    ConfigurationError,
    InvalidFileInputError,
    InvalidArgumentError,
    NotConnectedError,
    is_not_found,
)
from s3files.core.config import FileManagerConfig

from s3files.storage import (
    S3FileManager,
    InMemoryS3Client,
    ObjectStream,
    build_key,
    resolve_key,
    from_multipart_file,
    from_upload_file,
    create_file_manager,
)

__all__ = [
    # Version
    "__version__",
    # Types
    "StorageClass",
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
    # Errors
    "FileManagerError",
    "ConfigurationError",
    "InvalidFileInputError",
    "InvalidArgumentError",
    "NotConnectedError",
    "is_not_found",
    # Config
    "FileManagerConfig",
    # Storage
    "S3FileManager",
    "InMemoryS3Client",
    "ObjectStream",
    "build_key",
    "resolve_key",
    "from_multipart_file",
    "from_upload_file",
    "create_file_manager",
]
