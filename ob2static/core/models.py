"""Data models for ob2static."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class ExportError(Exception):
    """Base class for every error raised by an export run."""


class ConfigError(ExportError):
    """Configuration is missing or invalid."""


class FrontmatterError(ExportError):
    """A note starts with a frontmatter block that is not a YAML mapping."""


class InvalidLinkError(ExportError):
    """A [[wikilink]] payload does not follow target[#anchor][|alias]."""


class StoreError(ExportError):
    """An object store request failed."""


class RegistryFetchError(ExportError):
    """The image registry could not be read from the object store."""


class RegistryPersistError(ExportError):
    """The image registry could not be written back to the object store."""


class ImageUploadError(ExportError):
    """The image host rejected an upload or returned no URL."""


class PublishError(ExportError):
    """A post could not be written to the object store."""


class DeployError(ExportError):
    """The site rebuild dispatch was refused."""


@dataclass(frozen=True)
class VaultFile:
    """Stable handle to a file in the vault.

    Content is never stored here; read it through the vault that
    produced the handle.
    """
    path: Path
    root: Path

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def basename(self) -> str:
        """File name without extension, the default wikilink target."""
        return self.path.stem

    @property
    def extension(self) -> str:
        return self.path.suffix[1:]

    @property
    def is_markdown(self) -> bool:
        return self.extension.lower() == "md"

    @property
    def relative_path(self) -> str:
        return self.path.relative_to(self.root).as_posix()


@dataclass
class PublishableNote:
    """A note whose frontmatter has ``published: true``."""
    file: VaultFile
    frontmatter: Dict[str, Any]
    body: str

    @property
    def permalink(self) -> str:
        return post_slug(self.frontmatter, self.file)

    @property
    def title(self) -> str:
        title = self.frontmatter.get("title")
        return str(title) if title else self.file.basename


@dataclass
class Post:
    """Per-run working copy of a publishable note.

    Frontmatter and article are mutated in place by the rewrite stages
    and discarded once uploaded.
    """
    file: VaultFile
    frontmatter: Dict[str, Any]
    article: str
    missing_links: List[str] = field(default_factory=list)

    @property
    def slug(self) -> str:
        return post_slug(self.frontmatter, self.file)

    @property
    def title(self) -> str:
        title = self.frontmatter.get("title")
        return str(title) if title else self.file.basename


def post_slug(frontmatter: Dict[str, Any], file: VaultFile) -> str:
    """Public slug: ``plink`` when set, otherwise the file basename."""
    plink = frontmatter.get("plink")
    if plink is None or plink == "":
        return file.basename
    return str(plink)


@dataclass(frozen=True)
class LinkReference:
    """One parsed ``[[...]]`` or ``![[...]]`` occurrence."""
    raw: str
    payload: str
    is_embed: bool
    target: str
    anchor: Optional[str] = None
    alias: Optional[str] = None


@dataclass(frozen=True)
class PublishedNote:
    file: VaultFile
    permalink: str
    title: str


@dataclass(frozen=True)
class UnpublishedNote:
    file: VaultFile
    basename: str


@dataclass(frozen=True)
class Attachment:
    file: VaultFile


Resolution = Union[PublishedNote, UnpublishedNote, Attachment]


@dataclass(frozen=True)
class ImageEntry:
    """Registry row mapping a SHA-256 content digest to its hosted URL."""
    hash: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {"hash": self.hash, "url": self.url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageEntry":
        return cls(hash=str(data["hash"]), url=str(data["url"]))


@dataclass
class NoteError:
    """An error that occurred while processing a note.

    Used for errors in either the transform or the publish phase.
    """
    path: Path
    error: str
    title: Optional[str] = None


@dataclass
class PublishResult:
    """Result of a publish operation."""
    published_titles: List[str] = field(default_factory=list)
    failures: List[NoteError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    registry_persisted: bool = True

    @property
    def ok(self) -> bool:
        return not self.failures
