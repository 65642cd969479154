"""Content-addressed registry of uploaded images.

The registry is a JSON array of ``{"hash", "url"}`` objects stored at a
well-known key in the bucket. One ImageRegistry owns it for the whole run:
it is read once, consulted and extended in memory, and written back at most
once by ``flush()``. Concurrent requests for the same new image share a
single upload.
"""

import asyncio
import hashlib
import json
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from ob2static.core.models import (
    ImageEntry,
    RegistryFetchError,
    RegistryPersistError,
    StoreError,
)
from ob2static.core.store import ObjectStore

logger = logging.getLogger(__name__)

REGISTRY_KEY = "images.json"

Upload = Callable[[], Awaitable[str]]


def content_hash(content: bytes) -> str:
    """SHA-256 hex digest of the image bytes."""
    return hashlib.sha256(content).hexdigest()


class ImageRegistry:
    """In-process owner of the image registry document."""

    def __init__(self, store: ObjectStore, key: str = REGISTRY_KEY):
        self.store = store
        self.key = key
        self._entries: List[ImageEntry] = []
        self._urls: Dict[str, str] = {}
        self._pending: Dict[str, "asyncio.Future[str]"] = {}
        self._load_lock = asyncio.Lock()
        self._loaded = False
        self._dirty = False

    @property
    def entries(self) -> List[ImageEntry]:
        return list(self._entries)

    @property
    def dirty(self) -> bool:
        return self._dirty

    async def load(self) -> None:
        """Fetch the registry from the store, once.

        A missing key is an empty registry.

        Raises:
            RegistryFetchError: If the store fails or the document is malformed
        """
        async with self._load_lock:
            if self._loaded:
                return
            try:
                data = await self.store.get(self.key)
            except StoreError as e:
                raise RegistryFetchError(f"Error while fetching {self.key}: {e}") from e

            entries: List[ImageEntry] = []
            if data:
                try:
                    entries = [ImageEntry.from_dict(item) for item in json.loads(data)]
                except (ValueError, TypeError, KeyError) as e:
                    raise RegistryFetchError(f"Malformed {self.key}: {e}") from e

            for entry in entries:
                self._add(entry)
            self._loaded = True
            logger.info(f"Loaded {len(self._entries)} image registry entries from {self.key}")

    def lookup(self, digest: str) -> Optional[str]:
        return self._urls.get(digest)

    async def resolve(self, content: bytes, upload: Upload) -> str:
        """Return the hosted URL for ``content``, uploading it on a miss.

        Args:
            content: Image bytes
            upload: Coroutine factory performing the upload and returning its URL

        Returns:
            Public URL of the image
        """
        await self.load()
        digest = content_hash(content)

        url = self._urls.get(digest)
        if url is not None:
            logger.debug(f"Image {digest[:12]} already hosted at {url}")
            return url

        pending = self._pending.get(digest)
        if pending is None:
            pending = asyncio.ensure_future(self._upload(digest, upload))
            self._pending[digest] = pending
        return await asyncio.shield(pending)

    async def flush(self) -> bool:
        """Persist the registry if it changed during the run.

        Returns:
            True if a write happened, False if there was nothing to write

        Raises:
            RegistryPersistError: If the write failed
        """
        if not self._dirty:
            return False

        body = json.dumps([entry.to_dict() for entry in self._entries]).encode("utf-8")
        try:
            await self.store.put(self.key, body, "application/json")
        except StoreError as e:
            raise RegistryPersistError(f"Error while updating {self.key}: {e}") from e

        self._dirty = False
        logger.info(f"Saved {len(self._entries)} image registry entries to {self.key}")
        return True

    async def _upload(self, digest: str, upload: Upload) -> str:
        try:
            url = await upload()
        finally:
            self._pending.pop(digest, None)
        self._add(ImageEntry(hash=digest, url=url))
        self._dirty = True
        return url

    def _add(self, entry: ImageEntry) -> None:
        if entry.hash in self._urls:
            return
        self._entries.append(entry)
        self._urls[entry.hash] = entry.url
