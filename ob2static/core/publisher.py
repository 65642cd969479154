"""Export orchestration: discover, transform, publish."""

import asyncio
import copy
import logging
from typing import Iterable, List, Optional, Tuple

import httpx

from ob2static.config import ExporterConfig
from ob2static.core.discovery import FileSystemVault, Vault, VaultDiscovery
from ob2static.core.models import (
    ExportError,
    NoteError,
    Post,
    PublishError,
    PublishResult,
    RegistryPersistError,
    StoreError,
)
from ob2static.core.processor import ContentProcessor
from ob2static.core.store import ObjectStore, S3ObjectStore
from ob2static.images.pipeline import ImagePipeline
from ob2static.images.registry import ImageRegistry
from ob2static.images.uploader import EasyImageUploader
from ob2static.transforms.frontmatter import build_document
from ob2static.transforms.links import post_link

logger = logging.getLogger(__name__)

# Per-note failures; anything else is a bug and propagates
NOTE_ERRORS = (ExportError, OSError, UnicodeDecodeError)


class Publisher:
    """Runs one export of a vault to the object store.

    Phases are strictly ordered; within the transform and publish phases
    notes are handled concurrently. A note that fails to transform is never
    published, and the run is successful only if every note succeeded.
    """

    def __init__(
        self,
        config: ExporterConfig,
        vault: Vault,
        store: ObjectStore,
        uploader: EasyImageUploader,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Publisher.

        Args:
            config: Export settings
            vault: Source of note listings and content
            store: Destination bucket; closed when the run ends
            uploader: Image host client
            http_client: HTTP client to close when the run ends, if owned
        """
        self.config = config
        self.vault = vault
        self.store = store
        self.uploader = uploader
        self.http_client = http_client

    async def run(self) -> PublishResult:
        """Export every publishable note.

        Returns:
            PublishResult listing published titles and per-note failures

        Raises:
            RegistryFetchError: If the image registry cannot be read; nothing
                has been uploaded at that point
        """
        result = PublishResult()
        try:
            files = self.vault.list_files()
            index = await VaultDiscovery(self.vault).build_index(files)

            registry = ImageRegistry(self.store, self.config.registry_key)
            await registry.load()

            processor = ContentProcessor(
                index=index,
                images=ImagePipeline(self.vault, registry, self.uploader),
                link_transform=post_link(self.config.link_prefix),
            )
            posts = [
                Post(
                    file=note.file,
                    frontmatter=copy.deepcopy(note.frontmatter),
                    article=note.body,
                )
                for note in index.published_notes
            ]

            transformed = await self._transform_all(processor, posts, result)
            logger.info(f"Process complete, start uploading ({len(transformed)})")

            await self._publish_all(transformed, result)
            logger.info(f"Upload complete ({len(result.published_titles)} published)")

            await self._persist_registry(registry, result)
        finally:
            await self.close()

        return result

    async def publish(self, post: Post) -> str:
        """Serialize a post and write it to the store.

        Returns:
            The object key written

        Raises:
            PublishError: If the store rejects the write
        """
        key = self.post_key(post)
        document = build_document(post.frontmatter, post.article)
        try:
            await self.store.put(key, document.encode("utf-8"), "text/markdown")
        except StoreError as e:
            raise PublishError(f"Error while uploading post {post.file.relative_path}: {e}") from e
        logger.debug(f"Uploaded {post.file.relative_path} to {key}")
        return key

    def post_key(self, post: Post) -> str:
        if self.config.posts_prefix:
            return f"{self.config.posts_prefix}/{post.slug}.md"
        return f"{post.slug}.md"

    async def close(self) -> None:
        try:
            await self.store.close()
        finally:
            if self.http_client is not None:
                await self.http_client.aclose()

    async def _transform_all(
        self,
        processor: ContentProcessor,
        posts: List[Post],
        result: PublishResult,
    ) -> List[Post]:
        outcomes = await asyncio.gather(
            *(processor.process(post) for post in posts),
            return_exceptions=True,
        )
        transformed = []
        for post, _ in self._sort_outcomes(posts, outcomes, result, "transform"):
            transformed.append(post)
            # Logged by the processor as each reference was rewritten.
            for reference in post.missing_links:
                result.warnings.append(f"{post.file.relative_path}: file not found for {reference}")
        return transformed

    async def _publish_all(self, posts: List[Post], result: PublishResult) -> None:
        seen = {}
        for post in posts:
            key = self.post_key(post)
            if key in seen:
                message = (
                    f"{post.file.relative_path} and {seen[key]} both publish to {key}"
                )
                logger.warning(message)
                result.warnings.append(message)
            seen[key] = post.file.relative_path

        outcomes = await asyncio.gather(
            *(self.publish(post) for post in posts),
            return_exceptions=True,
        )
        for post, _ in self._sort_outcomes(posts, outcomes, result, "publish"):
            result.published_titles.append(post.title)

    async def _persist_registry(self, registry: ImageRegistry, result: PublishResult) -> None:
        try:
            await registry.flush()
        except RegistryPersistError as e:
            # Images are already live and linked; only deduplication is stale
            logger.error(str(e))
            result.registry_persisted = False
            result.warnings.append(str(e))

    def _sort_outcomes(
        self,
        posts: List[Post],
        outcomes: Iterable[object],
        result: PublishResult,
        phase: str,
    ) -> List[Tuple[Post, object]]:
        succeeded = []
        for post, outcome in zip(posts, outcomes):
            if isinstance(outcome, NOTE_ERRORS):
                logger.error(f"Failed to {phase} {post.file.relative_path}: {outcome}")
                result.failures.append(
                    NoteError(path=post.file.path, error=str(outcome), title=post.title)
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                succeeded.append((post, outcome))
        return succeeded


def create_publisher_from_config(config: ExporterConfig) -> Publisher:
    """Wire a Publisher against the filesystem vault, S3 and EasyImage.

    Raises:
        ConfigError: If required settings are missing
    """
    config.validate()
    http_client = httpx.AsyncClient(timeout=config.timeout)
    store = S3ObjectStore(
        bucket=config.bucket,
        endpoint=config.endpoint,
        region=config.region,
        access_key_id=config.access_key_id,
        secret_access_key=config.secret_access_key,
    )
    uploader = EasyImageUploader(
        endpoint=config.easyimage_api_endpoint,
        api_key=config.easyimage_api_key,
        client=http_client,
    )
    return Publisher(
        config=config,
        vault=FileSystemVault(config.vault_path),
        store=store,
        uploader=uploader,
        http_client=http_client,
    )
