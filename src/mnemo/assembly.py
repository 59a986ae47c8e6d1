"""Expanding document bodies with the content of the files they link to."""

from __future__ import annotations

import logging

from .config import LINKED_CONTENT_HEADER
from .models import DocumentRecord, ExpandedDocument, ResolvedLink
from .parser.links import extract_links, replace_links_with_text
from .resolver import LinkResolver

log = logging.getLogger(__name__)


def append_linked_content(body: str, resolved: dict[str, ResolvedLink]) -> str:
    """Append each successfully resolved link's content after ``body``.

    Order follows ``resolved`` (link discovery order); failed links add nothing.
    """
    parts = [body]
    for target, outcome in resolved.items():
        if outcome.ok and outcome.content:
            parts.append(LINKED_CONTENT_HEADER.format(target=target) + outcome.content)
    return "".join(parts)


async def expand_document(record: DocumentRecord, resolver: LinkResolver) -> ExpandedDocument:
    """Flatten links in a document's body to their text and append linked files."""
    links = extract_links(record.body)
    if not links:
        return ExpandedDocument(path=record.path, title=record.title, content=record.body)

    resolved = await resolver.resolve(record.path, links)
    content = append_linked_content(replace_links_with_text(record.body, links), resolved)
    return ExpandedDocument(path=record.path, title=record.title, content=content)


def assemble_clean_content(documents: list[ExpandedDocument]) -> str:
    """Join expanded bodies with a blank line, without titles or separators."""
    return "\n\n".join(document.content for document in documents)
