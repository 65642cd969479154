"""Frontmatter parsing and serialization.

A note carries metadata as a YAML block fenced by ``---`` lines at the very
start of the file. Notes that do not start with ``---`` simply have no
frontmatter.
"""

import re
from typing import Any, Dict, Optional, Tuple

import yaml

from ob2static.core.models import FrontmatterError

DELIMITER = "---"

_FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def parse_frontmatter(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """Split a note into its frontmatter mapping and body.

    Args:
        text: Full note text

    Returns:
        Tuple of (frontmatter, body). Frontmatter is None when the note
        does not start with the delimiter; the body is then the whole text.

    Raises:
        FrontmatterError: If the block is unterminated, is not valid YAML,
            or does not hold a mapping
    """
    if not text.startswith(DELIMITER):
        return None, text

    match = _FRONTMATTER_PATTERN.match(text)
    if match is None:
        raise FrontmatterError("Unterminated frontmatter block")

    try:
        frontmatter = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML in frontmatter: {e}") from e

    if frontmatter is None:
        frontmatter = {}
    if not isinstance(frontmatter, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(frontmatter).__name__}"
        )

    body = text[match.end():]
    # build_document() separates the block from the body with one blank line
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]

    return frontmatter, body


def build_document(frontmatter: Dict[str, Any], article: str) -> str:
    """Serialize frontmatter and article into a publishable markdown document.

    Keys keep their insertion order so the published file reads like the
    source note.
    """
    frontmatter_str = yaml.safe_dump(
        frontmatter,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
    return f"{DELIMITER}\n{frontmatter_str}{DELIMITER}\n\n{article}"
