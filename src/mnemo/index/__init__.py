"""In-memory index: document cache and hierarchical tag trie."""

from .cache import DocumentCache
from .trie import TagNode, TagTrie

__all__ = ["DocumentCache", "TagNode", "TagTrie"]
