"""
Unit Tests: InMemoryS3Client

Tests:
    - Put/get/head/delete semantics and error codes
    - Copy directives
    - Listing with opaque continuation tokens
    - Bucket restriction
    - Presigned URL shape
"""

import pytest
from botocore.exceptions import ClientError

from s3files.core.errors import is_not_found
from s3files.storage.memory import InMemoryS3Client

BUCKET = "bucket"


@pytest.fixture
def client():
    return InMemoryS3Client(buckets=[BUCKET])


class TestObjects:
    """Tests for single-object calls."""

    @pytest.mark.asyncio
    async def test_put_get(self, client):
        put = await client.put_object(
            Bucket=BUCKET, Key="a.txt", Body=b"abc", ContentType="text/plain",
            Metadata={"k": "v"},
        )
        response = await client.get_object(Bucket=BUCKET, Key="a.txt")
        async with response["Body"] as body:
            assert await body.read() == b"abc"
        assert response["ETag"] == put["ETag"]
        assert response["ETag"].startswith('"')
        assert response["ContentType"] == "text/plain"
        assert response["ContentLength"] == 3
        assert response["Metadata"] == {"k": "v"}
        # STANDARD is implicit
        assert "StorageClass" not in response

    @pytest.mark.asyncio
    async def test_default_content_type(self, client):
        await client.put_object(Bucket=BUCKET, Key="a", Body=b"")
        response = await client.head_object(Bucket=BUCKET, Key="a")
        assert response["ContentType"] == "binary/octet-stream"

    @pytest.mark.asyncio
    async def test_get_missing_raises_no_such_key(self, client):
        with pytest.raises(ClientError) as exc_info:
            await client.get_object(Bucket=BUCKET, Key="missing")
        assert exc_info.value.response["Error"]["Code"] == "NoSuchKey"
        assert is_not_found(exc_info.value)

    @pytest.mark.asyncio
    async def test_head_missing_raises_404(self, client):
        with pytest.raises(ClientError) as exc_info:
            await client.head_object(Bucket=BUCKET, Key="missing")
        assert exc_info.value.response["Error"]["Code"] == "404"
        assert is_not_found(exc_info.value)

    @pytest.mark.asyncio
    async def test_delete_missing_succeeds(self, client):
        await client.delete_object(Bucket=BUCKET, Key="missing")
        assert client.keys(BUCKET) == []

    @pytest.mark.asyncio
    async def test_body_chunked_reads(self, client):
        await client.put_object(Bucket=BUCKET, Key="a", Body=b"0123456789")
        body = (await client.get_object(Bucket=BUCKET, Key="a"))["Body"]
        assert await body.read(4) == b"0123"
        assert await body.read(4) == b"4567"
        assert await body.read(4) == b"89"
        assert await body.read(4) == b""
        body.close()
        with pytest.raises(ValueError):
            await body.read()

    @pytest.mark.asyncio
    async def test_unknown_bucket(self, client):
        with pytest.raises(ClientError) as exc_info:
            await client.put_object(Bucket="other", Key="a", Body=b"")
        assert exc_info.value.response["Error"]["Code"] == "NoSuchBucket"

    @pytest.mark.asyncio
    async def test_unrestricted_creates_buckets(self):
        client = InMemoryS3Client()
        await client.put_object(Bucket="anything", Key="a", Body=b"1")
        assert client.keys("anything") == ["a"]
        await client.head_bucket(Bucket="never-written")


class TestCopy:
    """Tests for copy directives."""

    @pytest.mark.asyncio
    async def test_copy_directive(self, client):
        await client.put_object(
            Bucket=BUCKET, Key="src", Body=b"x", ContentType="image/png",
            Metadata={"a": "1"}, StorageClass="GLACIER_IR",
        )
        await client.copy_object(
            Bucket=BUCKET, Key="dst", CopySource={"Bucket": BUCKET, "Key": "src"},
        )
        response = await client.head_object(Bucket=BUCKET, Key="dst")
        assert response["Metadata"] == {"a": "1"}
        assert response["ContentType"] == "image/png"
        assert "StorageClass" not in response

    @pytest.mark.asyncio
    async def test_replace_directive(self, client):
        await client.put_object(
            Bucket=BUCKET, Key="src", Body=b"x", ContentType="image/png", Metadata={"a": "1"},
        )
        await client.copy_object(
            Bucket=BUCKET, Key="dst", CopySource=f"{BUCKET}/src",
            MetadataDirective="REPLACE", Metadata={"b": "2"},
        )
        response = await client.head_object(Bucket=BUCKET, Key="dst")
        assert response["Metadata"] == {"b": "2"}
        assert response["ContentType"] == "binary/octet-stream"


class TestListing:
    """Tests for list_objects_v2."""

    @pytest.mark.asyncio
    async def test_pagination(self, client):
        for i in range(5):
            await client.put_object(Bucket=BUCKET, Key=f"p/{i}", Body=b"x")
        await client.put_object(Bucket=BUCKET, Key="q/0", Body=b"x")

        first = await client.list_objects_v2(Bucket=BUCKET, Prefix="p/", MaxKeys=2)
        assert [c["Key"] for c in first["Contents"]] == ["p/0", "p/1"]
        assert first["IsTruncated"] is True

        second = await client.list_objects_v2(
            Bucket=BUCKET, Prefix="p/", MaxKeys=2,
            ContinuationToken=first["NextContinuationToken"],
        )
        assert [c["Key"] for c in second["Contents"]] == ["p/2", "p/3"]

        third = await client.list_objects_v2(
            Bucket=BUCKET, Prefix="p/", MaxKeys=2,
            ContinuationToken=second["NextContinuationToken"],
        )
        assert [c["Key"] for c in third["Contents"]] == ["p/4"]
        assert third["IsTruncated"] is False
        assert "NextContinuationToken" not in third

    @pytest.mark.asyncio
    async def test_empty_listing_has_no_contents(self, client):
        response = await client.list_objects_v2(Bucket=BUCKET, Prefix="none/")
        assert "Contents" not in response
        assert response["KeyCount"] == 0

    @pytest.mark.asyncio
    async def test_bad_token(self, client):
        with pytest.raises(ClientError) as exc_info:
            await client.list_objects_v2(Bucket=BUCKET, ContinuationToken="abc")
        assert exc_info.value.response["Error"]["Code"] == "InvalidArgument"


class TestPresign:
    """Tests for presigned URLs."""

    @pytest.mark.asyncio
    async def test_url_carries_parameters(self, client):
        url = await client.generate_presigned_url(
            ClientMethod="get_object",
            Params={
                "Bucket": BUCKET,
                "Key": "a b/c.txt",
                "ResponseContentDisposition": "inline",
            },
            ExpiresIn=120,
        )
        assert url.startswith(f"https://{BUCKET}.s3.us-east-1.amazonaws.com/a%20b/c.txt?")
        assert "X-Amz-Expires=120" in url
        assert "response-content-disposition=inline" in url

    @pytest.mark.asyncio
    async def test_request_log_keeps_parameters(self, client):
        await client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": BUCKET, "Key": "k", "ResponseContentDisposition": "inline"},
            ExpiresIn=60,
        )
        [params] = [request["Params"] for request in client.requests_for("GeneratePresignedUrl")]
        assert params == {"Bucket": BUCKET, "Key": "k", "ResponseContentDisposition": "inline"}
