"""Tag completion suggestions for an autocompletion UI.

Returns plain TagCompletion models; rendering them is up to the host.
"""

from __future__ import annotations

from .config import MAX_RECENT_TAGS
from .index import TagTrie
from .models import TagCompletion


def fuzzy_score(query: str, target: str) -> int:
    """Score ``query`` as an in-order subsequence of ``target``.

    Consecutive matching characters score progressively higher. Returns 0
    unless every character of ``query`` is found.
    """
    score = 0
    streak = 0
    q = 0
    for char in target:
        if q >= len(query):
            break
        if query[q] == char:
            score += 1 + streak
            streak += 1
            q += 1
        else:
            streak = 0
    return score if q == len(query) else 0


def _memories(count: int) -> str:
    return f"({count} {'memory' if count == 1 else 'memories'})"


class TagCompleter:
    """Suggests tags from the trie, putting recently used tags first."""

    def __init__(self, trie: TagTrie, max_recent: int = MAX_RECENT_TAGS) -> None:
        self._trie = trie
        self._max_recent = max_recent
        self._recent: list[str] = []

    def complete(self, tag_input: str) -> list[TagCompletion]:
        """Completions for what the user has typed so far.

        Input ending in ``.`` lists the next level below that prefix plus a
        ``*`` wildcard entry; anything else is fuzzy matched against all tags.
        """
        if tag_input.endswith("."):
            items = self._next_level(tag_input)
            items.append(self._wildcard_item(tag_input))
            return sorted(items, key=lambda item: item.sort_text)
        return self._fuzzy(tag_input)

    def _next_level(self, prefix: str) -> list[TagCompletion]:
        items = []
        for full_tag in self._trie.children(prefix[:-1]):
            segment = full_tag[len(prefix):]
            items.append(
                TagCompletion(
                    label=segment,
                    insert_text=segment,
                    full_tag=full_tag,
                    detail=_memories(self._trie.count(full_tag)),
                    sort_text=self._sort_text(full_tag, segment),
                )
            )
        return items

    def _wildcard_item(self, prefix: str) -> TagCompletion:
        parent = prefix[:-1]
        return TagCompletion(
            label=f"* (All {parent} tags)",
            insert_text="*",
            detail="Wildcard - matches all subtags",
            sort_text="!",
        )

    def _fuzzy(self, query: str) -> list[TagCompletion]:
        tags = self._trie.get_all_tags()
        if query:
            needle = query.lower()
            scored = [(fuzzy_score(needle, tag.lower()), tag) for tag in tags]
            tags = [tag for score, tag in sorted(scored, key=lambda pair: -pair[0]) if score > 0]

        items = [self._item(tag) for tag in tags]
        if not query:
            items.sort(key=lambda item: item.sort_text)
        return items

    def _item(self, tag: str) -> TagCompletion:
        return TagCompletion(
            label=tag,
            insert_text=tag,
            full_tag=tag,
            detail=_memories(self._trie.count(tag)),
            sort_text=self._sort_text(tag, tag),
        )

    def _sort_text(self, full_tag: str, display: str) -> str:
        if full_tag in self._recent:
            return f"0{self._recent.index(full_tag):03d}_{display}"
        return f"1_{display}"

    def add_recent_tag(self, tag: str) -> None:
        """Move ``tag`` to the front of the recent list."""
        if tag in self._recent:
            self._recent.remove(tag)
        self._recent.insert(0, tag)
        del self._recent[self._max_recent:]

    def get_recent_tags(self) -> list[str]:
        return list(self._recent)
