"""
In-Memory S3 Client: Development and Testing Implementation

Provides an in-process stand-in for the aiobotocore S3 client, covering
the calls S3FileManager makes:
    - put_object / get_object / head_object / delete_object
    - copy_object (COPY and REPLACE metadata directives)
    - list_objects_v2 with opaque continuation tokens
    - generate_presigned_url
    - head_bucket

Design Principles:
    - Same call shape as aiobotocore: keyword arguments, dict responses
    - Missing keys raise botocore ClientError with code NoSuchKey, the
      same exception a real store raises
    - Every request is appended to ``requests`` for assertions
    - Thread-safe operations via asyncio locks

Performance Characteristics:
    - Put/Get/Delete: O(1) average case
    - List: O(n log n) over keys in the bucket
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote, urlencode

from botocore.exceptions import ClientError

from s3files.core.constants import MAX_LIST_PAGE


# =============================================================================
# CONSTANTS
# =============================================================================
# Content type S3 assigns when none is sent
STORE_DEFAULT_CONTENT_TYPE: str = "binary/octet-stream"
STORE_DEFAULT_STORAGE_CLASS: str = "STANDARD"
FAKE_ENDPOINT: str = "https://{bucket}.s3.{region}.amazonaws.com"


def _present(**params: Any) -> Dict[str, Any]:
    """Request parameters actually sent (None means omitted)."""
    return {name: value for name, value in params.items() if value is not None}


def _client_error(code: str, message: str, operation: str, status: int = 404) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


# =============================================================================
# STORED OBJECT
# =============================================================================
@dataclass
class StoredObject:
    """One object held by the in-memory client."""
    data: bytes
    content_type: str
    etag: str
    storage_class: str
    last_modified: datetime
    metadata: Dict[str, str] = field(default_factory=dict)


class MemoryBody:
    """
    Response body with the StreamingBody surface used by callers:
    ``read(amt)``, ``close()`` and async context management.
    """

    __slots__ = ("_data", "_offset", "closed")

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0
        self.closed = False

    async def read(self, amt: Optional[int] = None) -> bytes:
        if self.closed:
            raise ValueError("read on closed body")
        end = len(self._data) if amt is None else min(self._offset + amt, len(self._data))
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> MemoryBody:
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.close()


# =============================================================================
# IN-MEMORY CLIENT
# =============================================================================
class InMemoryS3Client:
    """
    In-memory S3 client.

    Buckets are created on first write unless ``buckets`` restricts them;
    a restricted client raises NoSuchBucket for anything else.

    Example:
        client = InMemoryS3Client(buckets=["uploads"])
        fm = S3FileManager(config, client=client)
        await fm.connect()

        await fm.upload(file_input)
        assert client.requests[-1][0] == "PutObject"
    """

    __slots__ = ("_buckets", "_restricted", "_lock", "_region", "requests", "closed")

    def __init__(
        self,
        buckets: Optional[Iterable[str]] = None,
        region: str = "us-east-1",
    ) -> None:
        self._buckets: Dict[str, Dict[str, StoredObject]] = {
            name: {} for name in (buckets or ())
        }
        self._restricted = buckets is not None
        self._lock = asyncio.Lock()
        self._region = region
        self.requests: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    # -------------------------------------------------------------------------
    # CONTEXT MANAGEMENT
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> InMemoryS3Client:
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.closed = True

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def _record(self, operation: str, params: Dict[str, Any]) -> None:
        self.requests.append((operation, dict(params)))

    def _bucket(self, name: str, operation: str) -> Dict[str, StoredObject]:
        if name not in self._buckets:
            if self._restricted:
                raise _client_error(
                    "NoSuchBucket", "The specified bucket does not exist", operation
                )
            self._buckets[name] = {}
        return self._buckets[name]

    def _object(self, bucket: str, key: str, operation: str) -> StoredObject:
        obj = self._bucket(bucket, operation).get(key)
        if obj is None:
            raise _client_error(
                "NoSuchKey", "The specified key does not exist.", operation
            )
        return obj

    def requests_for(self, operation: str) -> List[Dict[str, Any]]:
        """Parameters of every recorded request for one operation."""
        return [params for op, params in self.requests if op == operation]

    def keys(self, bucket: str) -> List[str]:
        """Sorted keys currently stored in a bucket."""
        return sorted(self._buckets.get(bucket, {}))

    # -------------------------------------------------------------------------
    # OBJECT OPERATIONS
    # -------------------------------------------------------------------------

    async def head_bucket(self, *, Bucket: str) -> Dict[str, Any]:
        self._record("HeadBucket", {"Bucket": Bucket})
        if Bucket not in self._buckets and self._restricted:
            raise _client_error("404", "Not Found", "HeadBucket")
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}

    async def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes = b"",
        ContentType: Optional[str] = None,
        Metadata: Optional[Dict[str, str]] = None,
        StorageClass: Optional[str] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        """Store object; ETag is the quoted MD5 of the body, as S3 returns it."""
        self._record("PutObject", _present(
            Bucket=Bucket,
            Key=Key,
            ContentType=ContentType,
            Metadata=Metadata,
            StorageClass=StorageClass,
            ContentLength=len(Body),
            **extra,
        ))

        async with self._lock:
            etag = f'"{hashlib.md5(Body).hexdigest()}"'
            self._bucket(Bucket, "PutObject")[Key] = StoredObject(
                data=bytes(Body),
                content_type=ContentType or STORE_DEFAULT_CONTENT_TYPE,
                etag=etag,
                storage_class=StorageClass or STORE_DEFAULT_STORAGE_CLASS,
                last_modified=datetime.now(timezone.utc),
                metadata=dict(Metadata or {}),
            )
        return {"ETag": etag}

    def _describe(self, obj: StoredObject) -> Dict[str, Any]:
        response: Dict[str, Any] = {
            "ContentType": obj.content_type,
            "ContentLength": len(obj.data),
            "LastModified": obj.last_modified,
            "ETag": obj.etag,
            "Metadata": dict(obj.metadata),
        }
        # S3 omits StorageClass for STANDARD objects
        if obj.storage_class != STORE_DEFAULT_STORAGE_CLASS:
            response["StorageClass"] = obj.storage_class
        return response

    async def get_object(self, *, Bucket: str, Key: str, **extra: Any) -> Dict[str, Any]:
        self._record("GetObject", {"Bucket": Bucket, "Key": Key, **extra})
        async with self._lock:
            obj = self._object(Bucket, Key, "GetObject")
            response = self._describe(obj)
            response["Body"] = MemoryBody(obj.data)
        return response

    async def head_object(self, *, Bucket: str, Key: str, **extra: Any) -> Dict[str, Any]:
        self._record("HeadObject", {"Bucket": Bucket, "Key": Key, **extra})
        async with self._lock:
            bucket = self._bucket(Bucket, "HeadObject")
            if Key not in bucket:
                # HEAD responses carry no body, so S3 reports a bare 404
                raise _client_error("404", "Not Found", "HeadObject")
            return self._describe(bucket[Key])

    async def delete_object(self, *, Bucket: str, Key: str, **extra: Any) -> Dict[str, Any]:
        """Delete object. Absent keys succeed, as on S3."""
        self._record("DeleteObject", {"Bucket": Bucket, "Key": Key, **extra})
        async with self._lock:
            self._bucket(Bucket, "DeleteObject").pop(Key, None)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}

    async def copy_object(
        self,
        *,
        Bucket: str,
        Key: str,
        CopySource: Any,
        MetadataDirective: Optional[str] = None,
        Metadata: Optional[Dict[str, str]] = None,
        ContentType: Optional[str] = None,
        StorageClass: Optional[str] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        """
        Server-side copy.

        COPY (the default directive) keeps the source's content type and
        metadata. REPLACE takes both from the request. Storage class is
        never inherited.
        """
        self._record("CopyObject", _present(
            Bucket=Bucket,
            Key=Key,
            CopySource=CopySource,
            MetadataDirective=MetadataDirective,
            Metadata=Metadata,
            ContentType=ContentType,
            StorageClass=StorageClass,
            **extra,
        ))

        if isinstance(CopySource, dict):
            source_bucket, source_key = CopySource["Bucket"], CopySource["Key"]
        else:
            source_bucket, _, source_key = str(CopySource).lstrip("/").partition("/")

        async with self._lock:
            source = self._object(source_bucket, source_key, "CopyObject")
            if MetadataDirective == "REPLACE":
                content_type = ContentType or STORE_DEFAULT_CONTENT_TYPE
                metadata = dict(Metadata or {})
            else:
                content_type = source.content_type
                metadata = dict(source.metadata)

            copied = StoredObject(
                data=source.data,
                content_type=content_type,
                etag=source.etag,
                storage_class=StorageClass or STORE_DEFAULT_STORAGE_CLASS,
                last_modified=datetime.now(timezone.utc),
                metadata=metadata,
            )
            self._bucket(Bucket, "CopyObject")[Key] = copied

        return {
            "CopyObjectResult": {
                "ETag": copied.etag,
                "LastModified": copied.last_modified,
            }
        }

    async def list_objects_v2(
        self,
        *,
        Bucket: str,
        Prefix: str = "",
        MaxKeys: int = MAX_LIST_PAGE,
        ContinuationToken: Optional[str] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        """
        List objects in key order.

        The continuation token encodes the last key returned, so pages stay
        consistent when objects before the cursor are deleted.
        """
        self._record("ListObjectsV2", _present(
            Bucket=Bucket,
            Prefix=Prefix or None,
            MaxKeys=MaxKeys,
            ContinuationToken=ContinuationToken,
            **extra,
        ))

        async with self._lock:
            bucket = self._bucket(Bucket, "ListObjectsV2")
            keys = sorted(k for k in bucket if k.startswith(Prefix))

            if ContinuationToken:
                try:
                    after = base64.urlsafe_b64decode(ContinuationToken.encode()).decode()
                except ValueError:
                    raise _client_error(
                        "InvalidArgument",
                        "The continuation token provided is incorrect",
                        "ListObjectsV2",
                        status=400,
                    ) from None
                keys = [k for k in keys if k > after]

            limit = max(0, min(MaxKeys, MAX_LIST_PAGE))
            page = keys[:limit]
            truncated = len(keys) > len(page)

            contents = [
                {
                    "Key": k,
                    "Size": len(bucket[k].data),
                    "LastModified": bucket[k].last_modified,
                    "ETag": bucket[k].etag,
                    "StorageClass": bucket[k].storage_class,
                }
                for k in page
            ]

        response: Dict[str, Any] = {
            "IsTruncated": truncated,
            "KeyCount": len(contents),
            "MaxKeys": MaxKeys,
            "Prefix": Prefix,
        }
        # S3 omits Contents entirely on an empty page
        if contents:
            response["Contents"] = contents
        if truncated and page:
            response["NextContinuationToken"] = base64.urlsafe_b64encode(
                page[-1].encode()
            ).decode()
        return response

    async def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: Optional[Dict[str, Any]] = None,
        ExpiresIn: int = 3600,
        HttpMethod: Optional[str] = None,
    ) -> str:
        """
        Build an unsigned URL that carries the request parameters.

        No signature is computed; the URL is only meant for assertions.
        """
        params = dict(Params or {})
        self._record(
            "GeneratePresignedUrl",
            {"ClientMethod": ClientMethod, "Params": dict(params), "ExpiresIn": ExpiresIn},
        )
        bucket = params.pop("Bucket")
        key = params.pop("Key")

        query: Dict[str, Any] = {"X-Amz-Expires": ExpiresIn}
        disposition = params.pop("ResponseContentDisposition", None)
        if disposition is not None:
            query["response-content-disposition"] = disposition
        query.update(params)

        base = FAKE_ENDPOINT.format(bucket=bucket, region=self._region)
        return f"{base}/{quote(key)}?{urlencode(query, quote_via=quote)}"


__all__ = [
    "InMemoryS3Client",
    "MemoryBody",
    "StoredObject",
]
