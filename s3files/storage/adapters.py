"""
Upload source adapters.

Two caller-side file shapes are normalized into one FileInput:

- ``from_multipart_file``: objects that already hold their bytes, as
  produced by multipart form parsers (``content``, ``filename``,
  ``content_type``, ``size``).
- ``from_upload_file``: objects exposing ``filename``, ``content_type`` and
  an awaitable ``read()``, the shape of Starlette/FastAPI ``UploadFile``.

Both return a fully materialized FileInput; nothing is read lazily during
the upload itself.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from s3files.core.errors import InvalidFileInputError
from s3files.core.types import FileInput

_MULTIPART = "multipart file"
_UPLOAD_FILE = "upload file"


@runtime_checkable
class MultipartFile(Protocol):
    """Buffered multipart form file."""
    content: bytes
    filename: str
    content_type: str
    size: int


@runtime_checkable
class AsyncReadableFile(Protocol):
    """File object read through an awaitable ``read()``."""
    filename: Optional[str]
    content_type: Optional[str]

    async def read(self) -> bytes: ...


def _require(file: Any, name: str, source: str) -> Any:
    value = getattr(file, name, None)
    if value is None:
        raise InvalidFileInputError.missing_field(name, source)
    return value


def from_multipart_file(file: MultipartFile) -> FileInput:
    """
    Convert a buffered multipart file into a FileInput.

    Raises:
        InvalidFileInputError: If content, filename, content_type or size
            is missing.
    """
    content = _require(file, "content", _MULTIPART)
    filename = _require(file, "filename", _MULTIPART)
    content_type = _require(file, "content_type", _MULTIPART)
    size = _require(file, "size", _MULTIPART)

    return FileInput(
        data=bytes(content),
        original_name=str(filename),
        mime_type=str(content_type),
        size=int(size),
    )


async def from_upload_file(file: AsyncReadableFile) -> FileInput:
    """
    Read an async file object to the end and wrap it as a FileInput.

    Size is the number of bytes actually read, not any declared size.
    Errors raised by ``read()`` propagate unchanged.

    Raises:
        InvalidFileInputError: If filename, content_type or read() is missing.
    """
    filename = _require(file, "filename", _UPLOAD_FILE)
    content_type = _require(file, "content_type", _UPLOAD_FILE)
    read = _require(file, "read", _UPLOAD_FILE)

    data = bytes(await read())

    return FileInput(
        data=data,
        original_name=str(filename),
        mime_type=str(content_type),
        size=len(data),
    )


__all__ = [
    "MultipartFile",
    "AsyncReadableFile",
    "from_multipart_file",
    "from_upload_file",
]
