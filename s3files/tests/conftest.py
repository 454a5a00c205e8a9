"""Shared fixtures: an in-memory bucket and a manager bound to it."""

import pytest

from s3files.core.config import FileManagerConfig
from s3files.storage.memory import InMemoryS3Client
from s3files.storage.s3_store import S3FileManager
from s3files.tests.fakes import BUCKET


@pytest.fixture
def config():
    return FileManagerConfig(region="us-east-1", bucket_name=BUCKET, base_path="uploads")


@pytest.fixture
def client():
    return InMemoryS3Client(buckets=[BUCKET])


@pytest.fixture
def fm(config, client):
    return S3FileManager(config, client=client)
