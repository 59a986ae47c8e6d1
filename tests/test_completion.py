"""Tests for tag completion."""

import pytest

from mnemo.completion import TagCompleter, fuzzy_score
from mnemo.index import TagTrie


@pytest.fixture
def completer() -> TagCompleter:
    trie = TagTrie()
    trie.add("/m/db.md", ["backend.database", "backend.performance"])
    trie.add("/m/auth.md", ["backend.auth", "security"])
    return TagCompleter(trie)


class TestFuzzyScore:
    """Subsequence scoring."""

    def test_consecutive_scores_higher(self):
        """A contiguous match beats a scattered one."""
        assert fuzzy_score("dat", "database") > fuzzy_score("dat", "d_a_t")

    def test_no_match(self):
        """Missing characters score zero."""
        assert fuzzy_score("xyz", "database") == 0

    def test_order_matters(self):
        """Characters must appear in order."""
        assert fuzzy_score("ba", "ab") == 0


class TestHierarchicalCompletion:
    """Input ending with a dot."""

    def test_next_level(self, completer):
        """Children of the prefix are offered with a wildcard entry first."""
        items = completer.complete("backend.")
        assert items[0].insert_text == "*"
        assert items[0].label == "* (All backend tags)"
        assert items[0].full_tag is None
        assert [item.label for item in items[1:]] == ["auth", "database", "performance"]
        assert items[1].full_tag == "backend.auth"
        assert items[1].detail == "(1 memory)"

    def test_unknown_prefix(self, completer):
        """An unknown prefix offers only the wildcard."""
        items = completer.complete("frontend.")
        assert [item.insert_text for item in items] == ["*"]


class TestFuzzyCompletion:
    """Free-form input."""

    def test_fuzzy_match(self, completer):
        """Tags containing the query as a subsequence are returned."""
        labels = [item.label for item in completer.complete("data")]
        assert labels[0] == "backend.database"
        assert "security" not in labels

    def test_case_insensitive(self, completer):
        """Matching ignores case."""
        assert [item.label for item in completer.complete("SECUR")] == ["security"]

    def test_empty_input_lists_all(self, completer):
        """Empty input lists every tag."""
        items = completer.complete("")
        assert len(items) == 5
        assert items[0].label == "backend"
        assert items[0].detail == "(2 memories)"


class TestRecentTags:
    """Recently used tags sort first."""

    def test_recent_first(self, completer):
        """Recent tags get the lowest sort text."""
        completer.add_recent_tag("security")
        items = completer.complete("")
        assert items[0].label == "security"

    def test_recent_order_and_limit(self):
        """Most recent first, capped at the configured size."""
        completer = TagCompleter(TagTrie(), max_recent=2)
        completer.add_recent_tag("a")
        completer.add_recent_tag("b")
        completer.add_recent_tag("a")
        completer.add_recent_tag("c")
        assert completer.get_recent_tags() == ["c", "a"]
