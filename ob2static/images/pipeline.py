"""Resolves vault attachments to hosted image URLs."""

from ob2static.core.discovery import Vault
from ob2static.core.models import VaultFile
from ob2static.images.registry import ImageRegistry
from ob2static.images.uploader import EasyImageUploader


class ImagePipeline:
    """Reads an attachment, deduplicates it by content and uploads on a miss."""

    def __init__(self, vault: Vault, registry: ImageRegistry, uploader: EasyImageUploader):
        self.vault = vault
        self.registry = registry
        self.uploader = uploader

    async def url_for(self, file: VaultFile) -> str:
        content = await self.vault.read_binary(file)

        async def upload() -> str:
            return await self.uploader.upload(file, content)

        return await self.registry.resolve(content, upload)
