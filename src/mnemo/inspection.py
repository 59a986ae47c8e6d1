"""Read-only views of the index for debugging and troubleshooting."""

from __future__ import annotations

from typing import Any

from .config import CONTENT_PREVIEW_CHARS
from .index import DocumentCache, TagTrie


def render_tag_tree(trie: TagTrie) -> str:
    """Markdown listing of every tag, grouped by top-level segment, with file counts."""
    tags = sorted(trie.get_all_tags())
    if not tags:
        return "No tags found in the memory index.\n"

    lines = ["# Memory Tags", "", f"Total tags: {len(tags)}", "", "---", ""]

    groups: dict[str, list[str]] = {}
    for tag in tags:
        groups.setdefault(tag.split(".")[0], []).append(tag)

    for top_level in sorted(groups):
        lines.append(f"## {top_level}")
        lines.append("")
        for tag in groups[top_level]:
            count = trie.count(tag)
            indent = "  " * tag.count(".")
            lines.append(f"{indent}- {tag} ({count} file{'' if count == 1 else 's'})")
        lines.append("")

    return "\n".join(lines) + "\n"


def _preview(body: str) -> str:
    if len(body) <= CONTENT_PREVIEW_CHARS:
        return body
    return body[:CONTENT_PREVIEW_CHARS] + "..."


def dump_documents(cache: DocumentCache) -> list[dict[str, Any]]:
    """JSON-ready view of every cached document with a short body preview."""
    return [
        {
            "path": record.path,
            "title": record.title,
            "tags": record.tags,
            "metadata": record.extra_metadata,
            "content_preview": _preview(record.body),
            "last_modified": record.last_modified.isoformat(),
        }
        for record in sorted(cache.get_all(), key=lambda r: r.path)
    ]
