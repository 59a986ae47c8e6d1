"""Inline markdown link extraction."""

import re

from ..models import LinkRecord

# Pattern for [text](target) links
# - (?<!!) skips image links like ![alt](img.png)
# - text and target may contain spaces, dots and slashes
LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]+)\]\(([^)]+)\)")

_DRIVE_LETTER = re.compile(r"^[a-zA-Z]:[\\/]")


def extract_links(body: str) -> list[LinkRecord]:
    """Extract inline links from markdown content.

    Args:
        body: Markdown content to scan.

    Returns:
        Links in order of appearance, with the character span of each match.
        Targets are returned verbatim.
    """
    return [
        LinkRecord(
            text=match.group(1),
            target=match.group(2),
            start=match.start(),
            end=match.end(),
        )
        for match in LINK_PATTERN.finditer(body)
    ]


def replace_links_with_text(body: str, links: list[LinkRecord]) -> str:
    """Replace each link span with its display text.

    Spans are substituted from the end of the body backwards so earlier
    offsets stay valid.
    """
    result = body
    for link in sorted(links, key=lambda item: item.start, reverse=True):
        result = result[: link.start] + link.text + result[link.end :]
    return result


def is_url(target: str) -> bool:
    """Check whether a link target points at a remote resource."""
    return target.startswith(("http://", "https://", "//", "mailto:"))


def is_anchor(target: str) -> bool:
    """Check whether a link target is an in-page anchor (#section)."""
    return target.startswith("#")


def is_absolute_path(target: str) -> bool:
    """Check whether a link target is an absolute file path (/x or C:/x)."""
    if target.startswith("//"):
        return False
    return target.startswith("/") or bool(_DRIVE_LETTER.match(target))
