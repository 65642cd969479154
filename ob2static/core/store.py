"""Object store access for published posts and the image registry."""

import logging
from contextlib import AsyncExitStack
from typing import Any, Optional, Protocol

from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from ob2static.core.models import StoreError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}


class ObjectStore(Protocol):
    """Key/value view of a bucket.

    ``get`` returns None for a missing key; every other failure raises
    StoreError.
    """

    async def get(self, key: str) -> Optional[bytes]:
        ...

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        ...

    async def close(self) -> None:
        ...


class S3ObjectStore:
    """S3-compatible bucket accessed through aiobotocore.

    The connection is opened explicitly (or via ``async with``) at the start
    of a run and released by ``close()``.
    """

    def __init__(
        self,
        bucket: str,
        endpoint: Optional[str] = None,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        self.bucket = bucket
        self.endpoint = endpoint or None
        self.region = region or None
        self._access_key_id = access_key_id or None
        self._secret_access_key = secret_access_key or None
        self._exit_stack = AsyncExitStack()
        self._client: Any = None

    async def open(self) -> "S3ObjectStore":
        if self._client is None:
            session = get_session()
            self._client = await self._exit_stack.enter_async_context(
                session.create_client(
                    "s3",
                    endpoint_url=self.endpoint,
                    region_name=self.region,
                    aws_access_key_id=self._access_key_id,
                    aws_secret_access_key=self._secret_access_key,
                )
            )
            logger.debug(f"Opened S3 client for bucket {self.bucket}")
        return self

    async def get(self, key: str) -> Optional[bytes]:
        client = await self._connected()
        try:
            response = await client.get_object(Bucket=self.bucket, Key=key)
            async with response["Body"] as stream:
                return await stream.read()
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                return None
            raise StoreError(f"Failed to read s3://{self.bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"Failed to read s3://{self.bucket}/{key}: {e}") from e

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        client = await self._connected()
        try:
            await client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to write s3://{self.bucket}/{key}: {e}") from e

    async def close(self) -> None:
        await self._exit_stack.aclose()
        self._client = None

    async def _connected(self) -> Any:
        if self._client is None:
            await self.open()
        return self._client

    async def __aenter__(self) -> "S3ObjectStore":
        return await self.open()

    async def __aexit__(self, *_: object) -> None:
        await self.close()
