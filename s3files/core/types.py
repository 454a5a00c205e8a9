"""
Core Type Definitions for the S3 File Manager

Value objects crossing the caller boundary:
- FileInput: canonical upload payload produced by the adapters
- UploadOptions / UploadResult: upload request and outcome
- SignedUrlOptions: presigned retrieval URL options
- ListOptions / ListEntry / ListPage: cursor-paginated listing
- ObjectInfo / BufferDownload / StreamDownload: download results

All types are frozen dataclasses. None of them is retained by the client
after the call that produced or consumed it returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Literal, Optional

from s3files.core.constants import MAX_LIST_PAGE

if TYPE_CHECKING:
    from s3files.storage.streaming import ObjectStream


# =============================================================================
# ENUMERATIONS
# =============================================================================
class StorageClass(str, Enum):
    """
    S3 storage classes.

    Values are the literal wire strings sent as the StorageClass parameter.
    """
    STANDARD = "STANDARD"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"
    STANDARD_IA = "STANDARD_IA"
    ONEZONE_IA = "ONEZONE_IA"
    INTELLIGENT_TIERING = "INTELLIGENT_TIERING"
    GLACIER = "GLACIER"
    GLACIER_IR = "GLACIER_IR"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"
    OUTPOSTS = "OUTPOSTS"
    EXPRESS_ONEZONE = "EXPRESS_ONEZONE"


DownloadMode = Literal["buffer", "stream"]
Disposition = Literal["inline", "attachment"]


# =============================================================================
# UPLOAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class FileInput:
    """
    Canonical upload payload.

    Built by the adapters from framework-specific file objects; the byte
    buffer is complete before any upload consumes it.

    Attributes:
        data: Complete file contents.
        original_name: File name as declared by the sender.
        mime_type: Declared media type.
        size: Byte length of ``data``.
    """
    data: bytes
    original_name: str
    mime_type: str
    size: int


@dataclass(frozen=True, slots=True)
class UploadOptions:
    """
    Naming and storage options for a single upload.

    ``key`` takes absolute precedence: when set, ``folder``, ``file_name``
    and ``generate_unique_file_name`` are ignored.

    Attributes:
        key: Explicit full object key, used verbatim (no base path).
        folder: Folder under the client's base path.
        file_name: Explicit stored file name.
        generate_unique_file_name: Store under a random UUID name that
            keeps the original extension.
        content_type: Overrides the input's declared media type.
        metadata: User metadata stored with the object.
        storage_class: Overrides the client's default storage class.
    """
    key: Optional[str] = None
    folder: Optional[str] = None
    file_name: Optional[str] = None
    generate_unique_file_name: bool = False
    content_type: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None
    storage_class: Optional[StorageClass] = None


@dataclass(frozen=True, slots=True)
class UploadResult:
    """
    Outcome of an upload.

    ``key`` is the durable identifier; persist it, never a signed URL.
    """
    key: str
    stored_name: str
    original_name: str
    size: int
    content_type: str
    storage_class: StorageClass
    etag: Optional[str] = None


# =============================================================================
# SIGNED ACCESS
# =============================================================================
@dataclass(frozen=True, slots=True)
class SignedUrlOptions:
    """
    Options for a presigned retrieval URL.

    Attributes:
        disposition: ``inline`` to render, ``attachment`` to force a download.
        file_name: Suggested download name (attachment only).
        expires_in: TTL in seconds; defaults to the client configuration.
    """
    disposition: Optional[Disposition] = None
    file_name: Optional[str] = None
    expires_in: Optional[int] = None


# =============================================================================
# COPY
# =============================================================================
@dataclass(frozen=True, slots=True)
class CopyOptions:
    """
    Options for server-side copy.

    ``metadata`` replaces the destination's metadata when given (even an
    empty dict); when None the source metadata is carried over.
    ``storage_class`` is independent of the metadata directive.
    """
    metadata: Optional[Dict[str, str]] = None
    storage_class: Optional[StorageClass] = None


# =============================================================================
# LISTING
# =============================================================================
@dataclass(frozen=True, slots=True)
class ListOptions:
    """
    Options for one listing page.

    Without ``prefix`` the listing is scoped to the folder itself: the
    request prefix ends in '/', so ``folder="a"`` matches ``a/x`` but not
    ``a-old/x``. Pass ``prefix`` to match partial names inside the folder.

    Attributes:
        folder: Folder under the base path to list.
        prefix: Extra key prefix inside the folder.
        max_results: Page size, 1..1000.
        continuation_token: Cursor from the previous page, passed back as-is.
    """
    folder: Optional[str] = None
    prefix: Optional[str] = None
    max_results: int = MAX_LIST_PAGE
    continuation_token: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ListEntry:
    """One object in a listing page."""
    key: str
    file_name: str
    size: int
    last_modified: Optional[datetime] = None
    storage_class: Optional[str] = None
    etag: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ListPage:
    """
    A page of listing results.

    ``continuation_token`` is opaque and only meaningful as input to the
    next ``list`` call for the same folder and prefix.
    """
    entries: List[ListEntry] = field(default_factory=list)
    continuation_token: Optional[str] = None
    has_more: bool = False


# =============================================================================
# DOWNLOAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class ObjectInfo:
    """Response metadata returned alongside downloaded content."""
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BufferDownload:
    """Fully drained object body."""
    data: bytes
    info: ObjectInfo


@dataclass(frozen=True, slots=True)
class StreamDownload:
    """
    Open object body.

    The caller owns ``stream`` and must consume or close it.
    """
    stream: "ObjectStream"
    info: ObjectInfo


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
]
