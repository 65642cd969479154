"""Tests for S3ObjectStore error mapping."""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from ob2static.core.models import StoreError
from ob2static.core.store import S3ObjectStore


class StubBody:
    def __init__(self, data):
        self.data = data

    async def __aenter__(self):
        return self

    async def __aexit__(self, *_):
        return None

    async def read(self):
        return self.data


class StubS3Client:
    """Minimal stand-in for an aiobotocore S3 client."""

    def __init__(self, objects=None, error=None):
        self.objects = dict(objects or {})
        self.error = error
        self.put_calls = []

    async def get_object(self, Bucket, Key):
        if self.error is not None:
            raise self.error
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": StubBody(self.objects[Key])}

    async def put_object(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.put_calls.append(kwargs)


def _store(client):
    store = S3ObjectStore(bucket="site")
    store._client = client
    return store


@pytest.mark.asyncio
async def test_get_existing_object():
    store = _store(StubS3Client({"images.json": b"[]"}))
    assert await store.get("images.json") == b"[]"


@pytest.mark.asyncio
async def test_get_missing_object_is_none():
    store = _store(StubS3Client())
    assert await store.get("images.json") is None


@pytest.mark.asyncio
async def test_get_access_denied():
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "GetObject")
    store = _store(StubS3Client(error=error))
    with pytest.raises(StoreError, match="s3://site/images.json"):
        await store.get("images.json")


@pytest.mark.asyncio
async def test_get_connection_error():
    error = EndpointConnectionError(endpoint_url="https://s3.example.com")
    store = _store(StubS3Client(error=error))
    with pytest.raises(StoreError):
        await store.get("images.json")


@pytest.mark.asyncio
async def test_put_passes_content_type():
    client = StubS3Client()
    store = _store(client)

    await store.put("posts/a.md", b"body", "text/markdown")

    assert client.put_calls == [{
        "Bucket": "site",
        "Key": "posts/a.md",
        "Body": b"body",
        "ContentType": "text/markdown",
    }]


@pytest.mark.asyncio
async def test_put_failure():
    error = ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, "PutObject")
    store = _store(StubS3Client(error=error))
    with pytest.raises(StoreError, match="posts/a.md"):
        await store.put("posts/a.md", b"body", "text/markdown")


def test_empty_settings_fall_back_to_defaults():
    store = S3ObjectStore(bucket="site", endpoint="", region="", access_key_id="")
    assert store.endpoint is None
    assert store.region is None
