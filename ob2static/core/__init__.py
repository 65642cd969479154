"""Core components for ob2static."""

from ob2static.core.models import ExportError, NoteError, Post, PublishableNote, PublishResult, VaultFile
from ob2static.core.discovery import FileSystemVault, Vault, VaultDiscovery
from ob2static.core.index import NoteIndex
from ob2static.core.processor import ContentProcessor
from ob2static.core.store import ObjectStore, S3ObjectStore
from ob2static.core.publisher import Publisher, create_publisher_from_config

__all__ = [
    "ExportError",
    "NoteError",
    "Post",
    "PublishableNote",
    "PublishResult",
    "VaultFile",
    "FileSystemVault",
    "Vault",
    "VaultDiscovery",
    "NoteIndex",
    "ContentProcessor",
    "ObjectStore",
    "S3ObjectStore",
    "Publisher",
    "create_publisher_from_config",
]
