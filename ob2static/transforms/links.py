"""Link transform factories for ob2static.

A link transform renders a resolved wikilink as a markdown link given the
visible text and the target permalink (which may carry a ``#anchor``).
"""

from typing import Callable

LinkTransform = Callable[[str, str], str]


def post_link(prefix: str = "/post") -> LinkTransform:
    """Create a transform producing absolute links under ``prefix``.

    Args:
        prefix: URL path the static site serves posts from

    Returns:
        A transform function (text, permalink) -> markdown link
    """
    base = prefix.rstrip("/")

    def transform(text: str, permalink: str) -> str:
        return f"[{text}]({base}/{permalink})"
    return transform


def image_tag(url: str, alt: str = "image") -> str:
    """Render an uploaded image as a markdown image tag."""
    return f"![{alt}]({url})"
