"""
Streaming object bodies.

ObjectStream wraps the body returned by ``get_object`` (an aiobotocore
StreamingBody, or the in-memory equivalent) and hands it to the caller as
an async iterator of byte chunks. The caller owns it: iterate it to the
end, or close it, or use it as an async context manager.
"""

from __future__ import annotations

import inspect
from typing import Any, AsyncIterator, Optional

from s3files.core.constants import DEFAULT_STREAM_CHUNK


class ObjectStream:
    """
    Async byte-chunk iterator over an open object body.

    Example:
        >>> result = await fm.download("reports/q1.csv", mode="stream")
        >>> async with result.stream as stream:
        ...     async for chunk in stream:
        ...         sink.write(chunk)
    """

    __slots__ = ("_body", "_chunk_size", "_closed", "_bytes_read")

    def __init__(self, body: Any, chunk_size: int = DEFAULT_STREAM_CHUNK) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._body = body
        self._chunk_size = chunk_size
        self._closed = False
        self._bytes_read = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    async def read(self, amt: Optional[int] = None) -> bytes:
        """
        Read up to ``amt`` bytes, or the whole remainder when None.

        Returns b"" once the body is exhausted or the stream is closed.
        """
        if self._closed:
            return b""
        data = await self._body.read(amt) if amt is not None else await self._body.read()
        self._bytes_read += len(data)
        return data

    async def iter_chunks(self, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
        """Yield chunks until the body is exhausted, then close."""
        size = chunk_size or self._chunk_size
        try:
            while True:
                chunk = await self.read(size)
                if not chunk:
                    break
                yield chunk
        finally:
            await self.close()

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.iter_chunks()

    async def close(self) -> None:
        """Release the underlying connection. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        result = self._body.close()
        if inspect.isawaitable(result):
            await result

    async def __aenter__(self) -> ObjectStream:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"ObjectStream(bytes_read={self._bytes_read}, "
            f"chunk_size={self._chunk_size}, closed={self._closed})"
        )


__all__ = ["ObjectStream"]
