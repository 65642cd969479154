"""Index of vault files used to resolve wikilink targets."""

from typing import Dict, List, Optional, Sequence

from ob2static.core.models import (
    Attachment,
    PublishableNote,
    PublishedNote,
    Resolution,
    UnpublishedNote,
    VaultFile,
)


class NoteIndex:
    """All vault files plus the publishable subset, built once per run.

    Matching is by basename only. When several files share a basename the
    first in enumeration order wins, and a publishable note always wins over
    any other file.
    """

    def __init__(self, files: Sequence[VaultFile], published: Sequence[PublishableNote]):
        self.files: List[VaultFile] = list(files)
        self.published_notes: List[PublishableNote] = list(published)
        self._published_by_basename: Dict[str, PublishableNote] = {}
        for note in self.published_notes:
            self._published_by_basename.setdefault(note.file.basename, note)

    def __len__(self) -> int:
        return len(self.published_notes)

    def find_target(self, raw_target: str) -> Optional[Resolution]:
        """Resolve a wikilink target.

        Args:
            raw_target: Target portion of a wikilink, optionally with extension

        Returns:
            PublishedNote, UnpublishedNote or Attachment; None when nothing
            in the vault matches
        """
        note = self._published_by_basename.get(raw_target)
        if note is None and raw_target.lower().endswith(".md"):
            note = self._published_by_basename.get(raw_target[:-3])
        if note is not None:
            return PublishedNote(file=note.file, permalink=note.permalink, title=note.title)

        for file in self.files:
            if raw_target == file.basename or raw_target == file.name:
                if file.is_markdown:
                    return UnpublishedNote(file=file, basename=file.basename)
                return Attachment(file=file)

        return None
