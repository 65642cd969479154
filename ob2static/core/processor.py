"""Content processor for rewriting Obsidian notes into public posts."""

import asyncio
import logging
import re
from typing import List, Optional, Tuple

from ob2static.core.index import NoteIndex
from ob2static.core.models import (
    Attachment,
    InvalidLinkError,
    LinkReference,
    Post,
    PublishedNote,
    UnpublishedNote,
)
from ob2static.images.pipeline import ImagePipeline
from ob2static.transforms.links import LinkTransform, image_tag, post_link
from ob2static.transforms.tags import TagTransform, leaf_segment, normalize_tags

logger = logging.getLogger(__name__)


def parse_reference(raw: str, is_embed: bool, payload: str) -> LinkReference:
    """Split a wikilink payload into target, anchor and alias.

    Raises:
        InvalidLinkError: If the payload is not target[#anchor][|alias]
    """
    match = ContentProcessor.PAYLOAD_PATTERN.match(payload)
    if match is None:
        raise InvalidLinkError(f"Invalid link {raw}")
    target, anchor, alias = match.groups()
    return LinkReference(
        raw=raw,
        payload=payload,
        is_embed=is_embed,
        target=target,
        anchor=anchor,
        alias=alias,
    )


class ContentProcessor:
    """Processes note content for publishing.

    Handles:
    - Title heading removal
    - Wikilink and embed resolution against the NoteIndex
    - Image upload through the ImagePipeline
    - Tag flattening
    """

    # [[payload]] or ![[payload]]
    WIKILINK_PATTERN = re.compile(r'(!?)\[\[([^\]]+)\]\]')

    # target[#anchor][|alias]
    PAYLOAD_PATTERN = re.compile(r'^([^#|]*)(?:#([^|]*))?(?:\|([^|]+))?$')

    # The H1 duplicates the title kept in frontmatter
    TITLE_HEADING_PATTERN = re.compile(r'^\n*# .*\n*')

    def __init__(
        self,
        index: NoteIndex,
        images: ImagePipeline,
        link_transform: Optional[LinkTransform] = None,
        tag_transform: Optional[TagTransform] = None,
    ):
        """Initialize ContentProcessor.

        Args:
            index: Index of vault files and publishable notes
            images: Pipeline turning attachments into hosted URLs
            link_transform: Transform for rendering links to published notes
            tag_transform: Transform applied to every frontmatter tag
        """
        self.index = index
        self.images = images
        self.link_transform = link_transform or post_link()
        self.tag_transform = tag_transform or leaf_segment()

    async def process(self, post: Post) -> Post:
        """Rewrite a post's article and tags in place.

        Args:
            post: The post to transform

        Returns:
            The same post, transformed
        """
        post.article, post.missing_links = await self.rewrite(
            post.article, source=post.file.relative_path
        )
        post.frontmatter = normalize_tags(post.frontmatter, self.tag_transform)
        return post

    async def rewrite(self, article: str, source: str = "<article>") -> Tuple[str, List[str]]:
        """Rewrite every wikilink and embed in an article.

        All references are parsed before any is resolved, so a malformed
        payload fails the note without triggering image uploads.

        Args:
            article: Note body without frontmatter
            source: Name of the note, used in warnings

        Returns:
            Tuple of (rewritten article, list of unresolved references as written)
        """
        article = self.TITLE_HEADING_PATTERN.sub('', article, count=1)

        matches = list(self.WIKILINK_PATTERN.finditer(article))
        references = [
            parse_reference(m.group(0), m.group(1) == '!', m.group(2))
            for m in matches
        ]

        missing_links: List[str] = []
        rendered = await asyncio.gather(
            *(self._render(ref, source, missing_links) for ref in references),
            return_exceptions=True,
        )
        for outcome in rendered:
            if isinstance(outcome, BaseException):
                raise outcome

        parts = []
        position = 0
        for match, replacement in zip(matches, rendered):
            parts.append(article[position:match.start()])
            parts.append(replacement)
            position = match.end()
        parts.append(article[position:])

        return ''.join(parts), missing_links

    async def _render(self, ref: LinkReference, source: str, missing_links: List[str]) -> str:
        resolution = self.index.find_target(ref.target)

        if resolution is None:
            logger.warning(f"{source}: file not found for {ref.raw}")
            missing_links.append(ref.raw)
            return ref.payload

        if isinstance(resolution, PublishedNote):
            permalink = resolution.permalink
            if ref.anchor:
                permalink += f"#{ref.anchor}"
            if ref.alias:
                text = ref.alias
            elif ref.anchor:
                text = f"{resolution.title}#{ref.anchor}"
            else:
                text = resolution.title
            return self.link_transform(text, permalink)

        if isinstance(resolution, UnpublishedNote):
            return ref.target

        if isinstance(resolution, Attachment):
            url = await self.images.url_for(resolution.file)
            return image_tag(url)

        raise TypeError(f"Unknown resolution {resolution!r}")
