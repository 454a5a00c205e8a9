"""
S3 File Manager
===============

Typed file operations over an S3-compatible object store (AWS S3, MinIO,
Cloudflare R2) through aioboto3.

Design Principles:
------------------
1. **Deterministic keys**: every upload key comes from ``resolve_key``
2. **Store errors pass through**: botocore exceptions reach the caller
   unchanged; only not-found is translated (None / False)
3. **No shared mutable state**: defaults live in the frozen config
4. **Private by default**: no operation sends an ACL; access is granted
   through presigned URLs
5. **Presigned URLs**: time-boxed retrieval without credentials

Algorithmic Complexity:
-----------------------
| Operation       | Requests        | Space    | Notes                       |
|-----------------|-----------------|----------|-----------------------------|
| upload          | 1               | O(n)     | n = object size, buffered   |
| download buffer | 1               | O(n)     | body drained before return  |
| download stream | 1               | O(chunk) | caller drains               |
| delete          | 1               | O(1)     | idempotent                  |
| delete_many     | k               | O(1000)  | chunks of 1000, concurrent  |
| copy            | 1               | O(1)     | server-side                 |
| list            | 1               | O(page)  | cursor-paginated            |
| exists          | 1               | O(1)     | body closed unread          |

Concurrency:
------------
All operations are coroutines on one event loop. ``delete_many`` is the
only fan-out. The aiobotocore client is safe for concurrent requests.
"""

from __future__ import annotations

import asyncio
from typing import (
    Any, AsyncIterator, Dict, List, Literal, Optional, Sequence,
    TYPE_CHECKING, Union, overload,
)
from urllib.parse import quote

from botocore.exceptions import ClientError

from s3files.core import constants as C
from s3files.core.config import FileManagerConfig
from s3files.core.errors import InvalidArgumentError, NotConnectedError, is_not_found
from s3files.core.types import (
    BufferDownload,
    CopyOptions,
    DownloadMode,
    FileInput,
    ListEntry,
    ListOptions,
    ListPage,
    ObjectInfo,
    SignedUrlOptions,
    StorageClass,
    StreamDownload,
    UploadOptions,
    UploadResult,
)
from s3files.observability.logging import StructuredLogger
from s3files.storage.keys import last_segment, list_prefix, resolve_key
from s3files.storage.streaming import ObjectStream

if TYPE_CHECKING:
    from types_aiobotocore_s3 import S3Client


logger = StructuredLogger("s3files.storage")

_DOWNLOAD_MODES = ("buffer", "stream")


def _strip_etag(etag: Optional[str]) -> Optional[str]:
    return etag.strip('"') if etag else None


def content_disposition(disposition: Optional[str], file_name: Optional[str]) -> Optional[str]:
    """
    ResponseContentDisposition value for a presigned URL.

    The file name is percent-encoded and given both as ``filename`` and as
    the RFC 6266 ``filename*`` form, so non-ASCII names survive.

    Example:
        >>> content_disposition("attachment", "q1 report.pdf")
        'attachment; filename="q1%20report.pdf"; filename*=UTF-8\\'\\'q1%20report.pdf'
    """
    if disposition is None:
        return None
    if disposition == "attachment" and file_name:
        encoded = quote(file_name, safe="")
        return f"attachment; filename=\"{encoded}\"; filename*=UTF-8''{encoded}"
    return disposition


def _object_info(response: Dict[str, Any]) -> ObjectInfo:
    return ObjectInfo(
        content_type=response.get("ContentType"),
        content_length=response.get("ContentLength"),
        last_modified=response.get("LastModified"),
        etag=_strip_etag(response.get("ETag")),
        storage_class=response.get("StorageClass"),
        metadata=dict(response.get("Metadata") or {}),
    )


class S3FileManager:
    """
    File manager bound to one bucket.

    Provides:
    - Uploads under deterministic, collision-free keys
    - Buffered or streamed downloads with not-found as None
    - Idempotent single and batch deletes
    - Server-side copy and move
    - Cursor-paginated listing
    - Presigned retrieval URLs

    Example:
        >>> config = FileManagerConfig(region="eu-west-1", bucket_name="uploads")
        >>> async with S3FileManager(config) as fm:
        ...     result = await fm.upload(file_input, UploadOptions(folder="avatars"))
        ...     url = await fm.get_signed_url(result.key)
    """

    __slots__ = (
        "_config",
        "_client",
        "_client_cm",
        "_session",
        "_owns_client",
        "_log",
    )

    def __init__(
        self,
        config: FileManagerConfig,
        client: Optional["S3Client"] = None,
    ) -> None:
        """
        Initialize the file manager. Performs no I/O.

        Args:
            config: Validated configuration.
            client: Pre-built S3 client. The manager never closes an
                injected client; its owner does.

        Note:
            Call `connect()` before performing operations when no client
            is injected.
        """
        self._config = config
        self._client: Optional["S3Client"] = client
        self._client_cm: Any = None
        self._session: Any = None
        self._owns_client = client is None
        self._log = logger.with_extra(bucket=config.bucket_name)

    # -------------------------------------------------------------------------
    # CONNECTION MANAGEMENT
    # -------------------------------------------------------------------------

    @property
    def config(self) -> FileManagerConfig:
        return self._config

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def raw_client(self) -> "S3Client":
        """
        Underlying aiobotocore S3 client.

        Escape hatch for calls this layer does not wrap. Anything sent
        through it (ACLs included) bypasses every guarantee made here.

        Raises:
            NotConnectedError: If no client is available.
        """
        return self._require_client("access raw client")

    async def connect(self, verify_bucket: bool = False) -> None:
        """
        Create the aioboto3 session and enter the S3 client context.

        No-op when already connected or when a client was injected.

        Args:
            verify_bucket: Issue ``head_bucket`` to fail fast on a wrong
                bucket name or missing permissions.

        Raises:
            botocore.exceptions.ClientError: If bucket verification fails.
        """
        if self._client is None:
            import aioboto3

            self._session = aioboto3.Session(**self._config.session_kwargs())
            self._client_cm = self._session.client("s3", **self._config.client_kwargs())
            self._client = await self._client_cm.__aenter__()
            self._owns_client = True
            self._log.debug(
                "Connected S3 client",
                region=self._config.region,
                endpoint_url=self._config.endpoint_url,
            )

        if verify_bucket:
            try:
                await self._client.head_bucket(Bucket=self._config.bucket_name)
            except ClientError:
                await self.close()
                raise

    async def close(self) -> None:
        """
        Release the S3 client.

        Safe to call multiple times. Injected clients are left open.
        """
        if self._client_cm is not None:
            cm, self._client_cm = self._client_cm, None
            self._client = None
            self._session = None
            await cm.__aexit__(None, None, None)
            self._log.debug("Closed S3 client")
        elif self._owns_client:
            self._client = None

    async def __aenter__(self) -> S3FileManager:
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _require_client(self, operation: str) -> "S3Client":
        if self._client is None:
            raise NotConnectedError.for_operation(operation)
        return self._client

    # -------------------------------------------------------------------------
    # UPLOAD
    # -------------------------------------------------------------------------

    async def upload(
        self,
        file: FileInput,
        options: Optional[UploadOptions] = None,
    ) -> UploadResult:
        """
        Upload a file under a resolved key.

        One ``put_object`` request; no ACL is ever sent. Metadata is sent
        only when given.

        Args:
            file: Materialized upload input (see the adapters).
            options: Naming and storage options.

        Returns:
            UploadResult with the final key and applied storage class.

        Raises:
            botocore.exceptions.ClientError: Store failures, unchanged.
        """
        client = self._require_client("upload")
        options = options or UploadOptions()

        resolved = resolve_key(file.original_name, options, self._config.base_path)
        content_type = options.content_type or file.mime_type or C.DEFAULT_CONTENT_TYPE
        storage_class = StorageClass(options.storage_class or self._config.storage_class)

        put_kwargs: Dict[str, Any] = {
            "Bucket": self._config.bucket_name,
            "Key": resolved.key,
            "Body": file.data,
            "ContentType": content_type,
            "StorageClass": storage_class.value,
        }
        if options.metadata:
            put_kwargs["Metadata"] = dict(options.metadata)

        response = await client.put_object(**put_kwargs)

        self._log.debug(
            "Uploaded object",
            key=resolved.key,
            size=file.size,
            content_type=content_type,
            storage_class=storage_class.value,
        )

        return UploadResult(
            key=resolved.key,
            stored_name=resolved.stored_name,
            original_name=file.original_name,
            size=file.size,
            content_type=content_type,
            storage_class=storage_class,
            etag=_strip_etag(response.get("ETag")),
        )

    # -------------------------------------------------------------------------
    # SIGNED ACCESS
    # -------------------------------------------------------------------------

    async def get_signed_url(
        self,
        key: str,
        options: Optional[SignedUrlOptions] = None,
    ) -> str:
        """
        Generate a presigned ``get_object`` URL.

        Generated on demand and never cached; persist the key, not the URL.

        Args:
            key: Object key. Existence is not checked.
            options: Disposition, suggested file name and TTL.

        Returns:
            Presigned URL string.

        Raises:
            InvalidArgumentError: If the TTL is outside 1..604800 seconds.
        """
        client = self._require_client("sign url")
        options = options or SignedUrlOptions()

        expires_in = options.expires_in or self._config.url_expiration_seconds
        if not 0 < expires_in <= C.MAX_PRESIGN_EXPIRY_S:
            raise InvalidArgumentError.out_of_range(
                "expires_in", expires_in, 1, C.MAX_PRESIGN_EXPIRY_S
            )

        params: Dict[str, Any] = {"Bucket": self._config.bucket_name, "Key": key}
        disposition = content_disposition(options.disposition, options.file_name)
        if disposition is not None:
            params["ResponseContentDisposition"] = disposition

        url = await client.generate_presigned_url(
            ClientMethod="get_object",
            Params=params,
            ExpiresIn=expires_in,
        )
        self._log.debug("Signed URL", key=key, expires_in=expires_in)
        return url

    # -------------------------------------------------------------------------
    # DOWNLOAD
    # -------------------------------------------------------------------------

    @overload
    async def download(self, key: str, mode: Literal["buffer"]) -> Optional[BufferDownload]: ...

    @overload
    async def download(
        self, key: str, mode: Literal["stream"] = ...
    ) -> Optional[StreamDownload]: ...

    async def download(
        self,
        key: str,
        mode: DownloadMode = "stream",
    ) -> Union[BufferDownload, StreamDownload, None]:
        """
        Retrieve an object.

        Args:
            key: Object key.
            mode: ``"buffer"`` drains the body before returning;
                ``"stream"`` hands an open ObjectStream to the caller, who
                must consume or close it.

        Returns:
            BufferDownload or StreamDownload, or None when the object does
            not exist or the response has no body.

        Raises:
            InvalidArgumentError: If mode is neither buffer nor stream.
            botocore.exceptions.ClientError: Store failures other than
                not-found, unchanged.
        """
        if mode not in _DOWNLOAD_MODES:
            raise InvalidArgumentError.invalid_choice("mode", mode, _DOWNLOAD_MODES)
        client = self._require_client("download")

        try:
            response = await client.get_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except ClientError as exc:
            if is_not_found(exc):
                self._log.debug("Object not found", key=key)
                return None
            raise

        body = response.get("Body")
        if body is None:
            return None

        info = _object_info(response)

        if mode == "buffer":
            async with body as stream:
                data = await stream.read()
            self._log.debug("Downloaded object", key=key, size=len(data), mode=mode)
            return BufferDownload(data=data, info=info)

        self._log.debug("Opened object stream", key=key, size=info.content_length)
        return StreamDownload(stream=ObjectStream(body), info=info)

    # -------------------------------------------------------------------------
    # DELETE
    # -------------------------------------------------------------------------

    async def delete(self, key: str) -> None:
        """
        Delete an object.

        Idempotent: deleting an absent key succeeds. No existence pre-check.
        """
        client = self._require_client("delete")
        await client.delete_object(Bucket=self._config.bucket_name, Key=key)
        self._log.debug("Deleted object", key=key)

    async def delete_many(self, keys: Sequence[str]) -> None:
        """
        Delete many objects.

        Keys are split into chunks of 1000 and every chunk is dispatched at
        once, one ``delete_object`` per key. Every key is attempted;
        afterwards the first failure in key order, if any, is re-raised
        unchanged.

        Args:
            keys: Object keys. Empty input issues no requests.

        Raises:
            botocore.exceptions.ClientError: First store failure, unchanged.
        """
        client = self._require_client("delete many")
        keys = list(keys)
        if not keys:
            return

        bucket = self._config.bucket_name
        chunks = [
            asyncio.gather(
                *(client.delete_object(Bucket=bucket, Key=key) for key in chunk),
                return_exceptions=True,
            )
            for chunk in (
                keys[start:start + C.MAX_DELETE_BATCH]
                for start in range(0, len(keys), C.MAX_DELETE_BATCH)
            )
        ]
        outcomes = [outcome for results in await asyncio.gather(*chunks) for outcome in results]
        failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]

        self._log.info(
            "Batch delete finished",
            requested=len(keys),
            failed=len(failures),
            chunks=len(chunks),
        )

        if failures:
            raise failures[0]

    # -------------------------------------------------------------------------
    # COPY / MOVE
    # -------------------------------------------------------------------------

    async def copy(
        self,
        source_key: str,
        destination_key: str,
        options: Optional[CopyOptions] = None,
    ) -> None:
        """
        Server-side copy within the bucket. No bytes pass through the client.

        Keys are full object keys; the base path is not applied.

        Without ``options.metadata`` the source metadata is carried over
        (``MetadataDirective=COPY``). With it, even when empty, the
        destination metadata is replaced (``REPLACE``), and S3 then resets
        the content type as well.

        Raises:
            botocore.exceptions.ClientError: Including NoSuchKey for a
                missing source.
        """
        client = self._require_client("copy")
        options = options or CopyOptions()
        storage_class = StorageClass(options.storage_class or self._config.storage_class)

        copy_kwargs: Dict[str, Any] = {
            "Bucket": self._config.bucket_name,
            "Key": destination_key,
            "CopySource": {"Bucket": self._config.bucket_name, "Key": source_key},
            "StorageClass": storage_class.value,
        }
        if options.metadata is not None:
            copy_kwargs["MetadataDirective"] = "REPLACE"
            copy_kwargs["Metadata"] = dict(options.metadata)
        else:
            copy_kwargs["MetadataDirective"] = "COPY"

        await client.copy_object(**copy_kwargs)
        self._log.debug(
            "Copied object",
            source_key=source_key,
            key=destination_key,
            directive=copy_kwargs["MetadataDirective"],
        )

    async def move(
        self,
        source_key: str,
        destination_key: str,
        options: Optional[CopyOptions] = None,
    ) -> None:
        """
        Copy then delete the source.

        Not atomic: if the delete fails the object exists under both keys
        and the delete error propagates.
        """
        await self.copy(source_key, destination_key, options)
        await self.delete(source_key)

    # -------------------------------------------------------------------------
    # LISTING
    # -------------------------------------------------------------------------

    async def list(self, options: Optional[ListOptions] = None) -> ListPage:
        """
        List one page of objects.

        The prefix is built from the base path, ``options.folder`` and
        ``options.prefix``. Pass ``continuation_token`` from the previous
        page, unchanged, to get the next one.

        Raises:
            InvalidArgumentError: If max_results is below 1.
        """
        client = self._require_client("list")
        options = options or ListOptions()

        if options.max_results < 1:
            raise InvalidArgumentError.out_of_range(
                "max_results", options.max_results, 1, C.MAX_LIST_PAGE
            )

        list_kwargs: Dict[str, Any] = {
            "Bucket": self._config.bucket_name,
            "MaxKeys": min(options.max_results, C.MAX_LIST_PAGE),
        }
        prefix = list_prefix(self._config.base_path, options.folder, options.prefix)
        if prefix:
            list_kwargs["Prefix"] = prefix
        if options.continuation_token:
            list_kwargs["ContinuationToken"] = options.continuation_token

        response = await client.list_objects_v2(**list_kwargs)

        entries: List[ListEntry] = [
            ListEntry(
                key=obj["Key"],
                file_name=last_segment(obj["Key"]),
                size=obj.get("Size", 0),
                last_modified=obj.get("LastModified"),
                storage_class=obj.get("StorageClass"),
                etag=_strip_etag(obj.get("ETag")),
            )
            for obj in response.get("Contents", [])
        ]

        page = ListPage(
            entries=entries,
            continuation_token=response.get("NextContinuationToken"),
            has_more=bool(response.get("IsTruncated", False)),
        )
        self._log.debug(
            "Listed objects",
            prefix=prefix,
            count=len(entries),
            has_more=page.has_more,
        )
        return page

    async def list_all(
        self,
        options: Optional[ListOptions] = None,
    ) -> AsyncIterator[ListEntry]:
        """
        Iterate every object under the folder and prefix.

        Automatically threads the continuation token through each page.

        Yields:
            ListEntry for each object, in store order.
        """
        options = options or ListOptions()
        token = options.continuation_token

        while True:
            page = await self.list(ListOptions(
                folder=options.folder,
                prefix=options.prefix,
                max_results=options.max_results,
                continuation_token=token,
            ))
            for entry in page.entries:
                yield entry
            if not page.has_more or not page.continuation_token:
                break
            token = page.continuation_token

    # -------------------------------------------------------------------------
    # EXISTENCE
    # -------------------------------------------------------------------------

    async def exists(self, key: str) -> bool:
        """
        Check whether an object exists.

        Probes with ``get_object`` and closes the body unread.

        Returns:
            False only when the store reports not-found.

        Raises:
            botocore.exceptions.ClientError: Any other store failure
                (AccessDenied included), unchanged.
        """
        client = self._require_client("check existence")
        try:
            response = await client.get_object(
                Bucket=self._config.bucket_name,
                Key=key,
            )
        except ClientError as exc:
            if is_not_found(exc):
                self._log.debug("Object not found", key=key)
                return False
            raise

        body = response.get("Body")
        if body is not None:
            await ObjectStream(body).close()
        return True

    def __repr__(self) -> str:
        return (
            f"S3FileManager(bucket={self._config.bucket_name!r}, "
            f"base_path={self._config.base_path!r}, connected={self.connected})"
        )


__all__ = ["S3FileManager", "content_disposition"]
