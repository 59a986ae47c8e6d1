"""Hierarchical tag index.

Tags are dot-separated paths such as ``backend.database.postgres``. Each
segment is a node in a trie, and every node holds the set of documents tagged
at that node *or below it*, so a query for ``backend`` also returns documents
tagged ``backend.database.postgres``.

A flat map from every tag prefix to its documents sits next to the trie for
constant-time exact lookups. Both structures are updated together.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

SINGLE_WILDCARD = "*"
DEEP_WILDCARD = "**"


@dataclass
class TagNode:
    """One segment of a tag path."""

    name: str
    full_path: str
    children: dict[str, TagNode] = field(default_factory=dict)
    documents: set[str] = field(default_factory=set)


def _split(tag: str) -> list[str]:
    return tag.split(".")


class TagTrie:
    """Tag trie plus flat exact-match index."""

    def __init__(self) -> None:
        self._root = TagNode(name="", full_path="")
        self._flat: dict[str, set[str]] = {}
        # Tags each document was added with, needed to keep shared ancestors
        # populated when only some of a document's tags are removed.
        self._declared: dict[str, set[str]] = {}

    # ─────────────────────────────────────────────────────────────────────
    # Mutation
    # ─────────────────────────────────────────────────────────────────────

    def add(self, path: str, tags: Iterable[str]) -> None:
        """Register ``path`` under each tag and every ancestor of each tag."""
        declared = self._declared.setdefault(path, set())
        for tag in tags:
            declared.add(tag)
            self._add_tag(path, tag)

    def _add_tag(self, path: str, tag: str) -> None:
        node = self._root
        node.documents.add(path)

        for segment in _split(tag):
            child = node.children.get(segment)
            if child is None:
                full_path = f"{node.full_path}.{segment}" if node.full_path else segment
                child = TagNode(name=segment, full_path=full_path)
                node.children[segment] = child
            node = child
            node.documents.add(path)
            self._flat.setdefault(node.full_path, set()).add(path)

    def remove(self, path: str, tags: Iterable[str]) -> None:
        """Unregister ``path`` from each tag.

        Unknown tag/document combinations are ignored. Ancestors that the
        document still reaches through one of its other tags keep it.
        """
        declared = self._declared.get(path)
        if declared is None:
            return

        removed = {tag for tag in tags if tag in declared}
        if not removed:
            return

        declared -= removed
        chains = [self._discard_tag(path, tag) for tag in removed]

        if declared:
            # Re-add what is left so shared prefixes stay populated
            for tag in declared:
                self._add_tag(path, tag)
        else:
            del self._declared[path]
            self._root.documents.discard(path)

        for chain in chains:
            self._prune(chain)

    def _discard_tag(self, path: str, tag: str) -> list[TagNode]:
        chain: list[TagNode] = [self._root]
        node = self._root
        for segment in _split(tag):
            child = node.children.get(segment)
            if child is None:
                break
            node = child
            chain.append(node)

        for node in chain[1:]:
            node.documents.discard(path)
            docs = self._flat.get(node.full_path)
            if docs is not None:
                docs.discard(path)
                if not docs:
                    del self._flat[node.full_path]
        return chain

    @staticmethod
    def _prune(chain: list[TagNode]) -> None:
        """Detach empty nodes from the leaf of ``chain`` upwards."""
        for parent, child in reversed(list(zip(chain, chain[1:]))):
            if child.documents:
                break
            if parent.children.get(child.name) is child:
                del parent.children[child.name]

    def clear(self) -> None:
        """Drop every tag and document."""
        self._root = TagNode(name="", full_path="")
        self._flat.clear()
        self._declared.clear()
        log.debug("Cleared tag index")

    # ─────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────

    def query_exact(self, tag: str) -> set[str]:
        """Documents tagged with ``tag`` or any descendant of it."""
        return set(self._flat.get(tag, ()))

    def query_wildcard(self, pattern: str) -> set[str]:
        """Documents matching a pattern with ``*`` and ``**`` segments.

        ``*`` matches exactly one level, ``**`` matches zero or more levels,
        any other segment must match literally.
        """
        matched: set[str] = set()
        self._match(self._root, _split(pattern), 0, matched)
        return matched

    def _match(self, node: TagNode, parts: list[str], index: int, matched: set[str]) -> None:
        if index >= len(parts):
            matched.update(node.documents)
            return

        part = parts[index]

        if part == SINGLE_WILDCARD:
            for child in node.children.values():
                self._match(child, parts, index + 1, matched)
        elif part == DEEP_WILDCARD:
            # Zero levels: continue with the rest of the pattern here
            self._match(node, parts, index + 1, matched)
            # One more level: retry the same pattern on each child
            for child in node.children.values():
                self._match(child, parts, index, matched)
        else:
            child = node.children.get(part)
            if child is not None:
                self._match(child, parts, index + 1, matched)

    def get_all_tags(self) -> list[str]:
        """Every tag path in the index, including intermediate prefixes."""
        return list(self._flat)

    def get_tags_for_document(self, path: str) -> list[str]:
        """Every tag path whose document set contains ``path``."""
        return [tag for tag, docs in self._flat.items() if path in docs]

    def count(self, tag: str) -> int:
        """Number of documents under ``tag``."""
        return len(self._flat.get(tag, ()))

    def children(self, tag: str = "") -> list[str]:
        """Full paths of the direct children of ``tag`` (root when empty)."""
        node = self._root
        if tag:
            for segment in _split(tag):
                node = node.children.get(segment)
                if node is None:
                    return []
        return [child.full_path for child in node.children.values()]

    @property
    def documents(self) -> set[str]:
        """Every document currently holding at least one tag."""
        return set(self._root.documents)

    def __len__(self) -> int:
        return len(self._flat)

    def __contains__(self, tag: object) -> bool:
        return tag in self._flat
