"""Tag transforms for ob2static.

Obsidian tags are hierarchical (``domain/cs/algorithms``); the static site
only knows flat tags, so each tag is reduced to its leaf segment.
"""

from typing import Any, Callable, Dict

TagTransform = Callable[[str], str]


def leaf_segment(separator: str = "/") -> TagTransform:
    """Create a transform keeping the last segment of a hierarchical tag.

    Leading and trailing separators are ignored, so ``"a/b/"`` becomes ``"b"``.

    Args:
        separator: Hierarchy separator

    Returns:
        A transform function tag -> tag
    """
    def transform(tag: str) -> str:
        return tag.strip(separator).rsplit(separator, 1)[-1]
    return transform


def normalize_tags(
    frontmatter: Dict[str, Any],
    transform: TagTransform = leaf_segment(),
) -> Dict[str, Any]:
    """Flatten the ``tags`` entry of a frontmatter mapping.

    A single string tag and every string element of a tag list are passed
    through ``transform``; list order and length are preserved and
    non-string elements are kept as they are.

    Returns:
        A new frontmatter mapping; the input is not modified
    """
    result = dict(frontmatter)
    if "tags" not in result:
        return result

    tags = result["tags"]
    if isinstance(tags, str):
        result["tags"] = transform(tags)
    elif isinstance(tags, list):
        result["tags"] = [
            transform(tag) if isinstance(tag, str) else tag for tag in tags
        ]
    return result
