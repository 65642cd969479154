"""
ob2static - Export published Obsidian notes to a static site bucket

Selects notes marked ``published: true`` and publishes them to an
S3-compatible bucket with support for:
- Wikilink conversion to public permalinks
- Image upload with content-addressed deduplication
- Hierarchical tag flattening
- Deploy dispatch to rebuild the site
"""

from ob2static.core.models import ExportError, NoteError, Post, PublishableNote, PublishResult, VaultFile
from ob2static.core.discovery import FileSystemVault, VaultDiscovery
from ob2static.core.index import NoteIndex
from ob2static.core.processor import ContentProcessor
from ob2static.core.publisher import Publisher, create_publisher_from_config
from ob2static.config import ExporterConfig, load_config
from ob2static.images.registry import ImageRegistry

__version__ = "0.1.0"

__all__ = [
    "ExportError",
    "NoteError",
    "Post",
    "PublishableNote",
    "PublishResult",
    "VaultFile",
    "FileSystemVault",
    "VaultDiscovery",
    "NoteIndex",
    "ContentProcessor",
    "Publisher",
    "create_publisher_from_config",
    "ExporterConfig",
    "load_config",
    "ImageRegistry",
]
