"""Vault access and discovery of publishable notes."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from ob2static.core.index import NoteIndex
from ob2static.core.models import FrontmatterError, PublishableNote, VaultFile
from ob2static.transforms.frontmatter import parse_frontmatter

logger = logging.getLogger(__name__)


class Vault(Protocol):
    """What the exporter needs from the host application."""

    def list_files(self) -> List[VaultFile]:
        ...

    async def read_text(self, file: VaultFile) -> str:
        ...

    async def read_binary(self, file: VaultFile) -> bytes:
        ...


class FileSystemVault:
    """A vault that is a plain directory on disk.

    Dot-directories (``.obsidian``, ``.trash``, ``.git``) and dotfiles are
    skipped. Files are enumerated in sorted relative-path order, which is
    the order basename collisions are resolved in.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def list_files(self) -> List[VaultFile]:
        if not self.root.is_dir():
            raise FileNotFoundError(f"Vault directory not found: {self.root}")

        files = []
        for path in sorted(self.root.rglob("*")):
            relative = path.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if path.is_file():
                files.append(VaultFile(path=path, root=self.root))
        return files

    async def read_text(self, file: VaultFile) -> str:
        return await asyncio.to_thread(file.path.read_text, encoding="utf-8")

    async def read_binary(self, file: VaultFile) -> bytes:
        return await asyncio.to_thread(file.path.read_bytes)


class VaultDiscovery:
    """Finds the notes eligible for publishing in a vault."""

    def __init__(self, vault: Vault):
        self.vault = vault

    async def build_index(self, files: Optional[Sequence[VaultFile]] = None) -> NoteIndex:
        """Read every markdown note and index the publishable ones.

        Args:
            files: Vault listing to use; enumerated from the vault if omitted

        Returns:
            NoteIndex over all files, publishable notes in enumeration order
        """
        if files is None:
            files = self.vault.list_files()

        markdown = [f for f in files if f.is_markdown]
        notes = await asyncio.gather(*(self._load_note(f) for f in markdown))
        published = [note for note in notes if note is not None]

        logger.info(f"Found {len(published)} publishable notes out of {len(markdown)}")
        return NoteIndex(files, published)

    async def _load_note(self, file: VaultFile) -> Optional[PublishableNote]:
        """Parse a note and return it if it is publishable.

        Unreadable notes, notes without frontmatter, with unparsable
        frontmatter, or without ``published: true`` are skipped.
        """
        try:
            text = await self.vault.read_text(file)
            frontmatter, body = parse_frontmatter(text)
        except (FrontmatterError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Skipping {file.relative_path}: {e}")
            return None

        if frontmatter is None or not is_published(frontmatter):
            return None

        return PublishableNote(file=file, frontmatter=frontmatter, body=body)


def is_published(frontmatter: dict) -> bool:
    """True only for a literal boolean ``published: true``."""
    return frontmatter.get("published") is True
