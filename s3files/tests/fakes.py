"""Test doubles built on the in-memory client."""

import asyncio
from typing import Any, Dict, Iterable

from botocore.exceptions import ClientError

from s3files.core.types import FileInput
from s3files.storage.memory import InMemoryS3Client

BUCKET = "test-bucket"


class FailingS3Client(InMemoryS3Client):
    """In-memory client that answers AccessDenied for chosen keys."""

    def __init__(self, denied: Iterable[str] = (), **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.denied = set(denied)
        self.raised: Dict[str, ClientError] = {}

    def _deny(self, key: str, operation: str) -> None:
        if key in self.denied:
            error = ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
                operation,
            )
            self.raised[key] = error
            raise error

    async def delete_object(self, *, Bucket: str, Key: str, **extra: Any) -> Dict[str, Any]:
        self._deny(Key, "DeleteObject")
        return await super().delete_object(Bucket=Bucket, Key=Key, **extra)

    async def get_object(self, *, Bucket: str, Key: str, **extra: Any) -> Dict[str, Any]:
        self._deny(Key, "GetObject")
        return await super().get_object(Bucket=Bucket, Key=Key, **extra)


class InFlightS3Client(InMemoryS3Client):
    """Counts delete_object calls that are running at the same time."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.in_flight = 0
        self.peak_in_flight = 0

    async def delete_object(self, *, Bucket: str, Key: str, **extra: Any) -> Dict[str, Any]:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            return await super().delete_object(Bucket=Bucket, Key=Key, **extra)
        finally:
            self.in_flight -= 1


class BodylessS3Client(InMemoryS3Client):
    """Returns get_object responses without a Body."""

    async def get_object(self, *, Bucket: str, Key: str, **extra: Any) -> Dict[str, Any]:
        response = await super().get_object(Bucket=Bucket, Key=Key, **extra)
        response.pop("Body").close()
        return response


def make_input(
    data: bytes = b"hello world",
    name: str = "photo.jpg",
    mime_type: str = "image/jpeg",
) -> FileInput:
    return FileInput(data=data, original_name=name, mime_type=mime_type, size=len(data))
