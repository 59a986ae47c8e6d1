"""Tests for the hierarchical tag trie."""

import pytest

from mnemo.index import TagTrie


@pytest.fixture
def sample_trie() -> TagTrie:
    """Two documents sharing the backend prefix."""
    trie = TagTrie()
    trie.add("/m/db.md", ["backend.database", "backend.performance"])
    trie.add("/m/auth.md", ["backend.auth", "security"])
    return trie


class TestExactQuery:
    """Exact tag lookups."""

    def test_leaf_tag(self, sample_trie):
        """A leaf tag returns only its documents."""
        assert sample_trie.query_exact("backend.database") == {"/m/db.md"}

    def test_ancestor_includes_descendants(self, sample_trie):
        """A prefix returns every document tagged at or below it."""
        assert sample_trie.query_exact("backend") == {"/m/db.md", "/m/auth.md"}

    def test_unknown_tag(self, sample_trie):
        """Unknown tags return an empty set."""
        assert sample_trie.query_exact("frontend") == set()
        assert sample_trie.query_exact("backend.database.postgres") == set()

    def test_result_is_a_copy(self, sample_trie):
        """Mutating a result does not touch the index."""
        result = sample_trie.query_exact("backend")
        result.clear()
        assert sample_trie.count("backend") == 2

    def test_no_duplicates(self):
        """A document tagged twice under a prefix is listed once."""
        trie = TagTrie()
        trie.add("/m/a.md", ["x.y", "x.z", "x"])
        assert trie.query_exact("x") == {"/m/a.md"}
        assert trie.count("x") == 1


class TestWildcardQuery:
    """Patterns with * and ** segments."""

    def test_single_level(self, sample_trie):
        """backend.* matches each child of backend."""
        assert sample_trie.query_wildcard("backend.*") == {"/m/db.md", "/m/auth.md"}

    def test_single_level_does_not_match_zero_levels(self):
        """a.* needs a child below a."""
        trie = TagTrie()
        trie.add("/m/a.md", ["a"])
        trie.add("/m/b.md", ["a.b"])
        assert trie.query_wildcard("a.*") == {"/m/b.md"}

    def test_leading_wildcard(self, sample_trie):
        """*.auth matches auth one level below any top-level tag."""
        assert sample_trie.query_wildcard("*.auth") == {"/m/auth.md"}

    def test_wildcard_without_star_equals_exact(self, sample_trie):
        """A pattern without stars behaves like an exact query."""
        for tag in ["backend", "backend.database", "security", "missing"]:
            assert sample_trie.query_wildcard(tag) == sample_trie.query_exact(tag)

    def test_deep_wildcard_any_depth(self):
        """**.postgres finds postgres at any depth."""
        trie = TagTrie()
        trie.add("/m/a.md", ["postgres"])
        trie.add("/m/b.md", ["backend.database.postgres"])
        trie.add("/m/c.md", ["backend.database.mysql"])
        assert trie.query_wildcard("**.postgres") == {"/m/a.md", "/m/b.md"}

    def test_deep_wildcard_trailing(self):
        """backend.** matches backend itself and everything below."""
        trie = TagTrie()
        trie.add("/m/a.md", ["backend"])
        trie.add("/m/b.md", ["backend.x.y"])
        trie.add("/m/c.md", ["frontend"])
        assert trie.query_wildcard("backend.**") == {"/m/a.md", "/m/b.md"}

    def test_deep_wildcard_alone(self, sample_trie):
        """** matches every document."""
        assert sample_trie.query_wildcard("**") == {"/m/db.md", "/m/auth.md"}

    def test_no_match(self, sample_trie):
        """Patterns matching nothing return an empty set."""
        assert sample_trie.query_wildcard("frontend.*") == set()


class TestRemove:
    """Removing document/tag associations."""

    def test_remove_is_inverse_of_add(self):
        """Adding then removing the same tags leaves the trie empty."""
        trie = TagTrie()
        trie.add("/m/a.md", ["x.y.z", "q"])
        trie.remove("/m/a.md", ["x.y.z", "q"])
        assert trie.get_all_tags() == []
        assert trie.documents == set()
        assert len(trie) == 0

    def test_shared_ancestor_kept(self):
        """Removing one tag keeps ancestors reached through another."""
        trie = TagTrie()
        trie.add("/m/a.md", ["backend.database", "backend.auth"])
        trie.remove("/m/a.md", ["backend.database"])
        assert trie.query_exact("backend") == {"/m/a.md"}
        assert trie.query_exact("backend.auth") == {"/m/a.md"}
        assert "backend.database" not in trie

    def test_other_documents_untouched(self, sample_trie):
        """Removing one document leaves the others in place."""
        sample_trie.remove("/m/db.md", ["backend.database", "backend.performance"])
        assert sample_trie.query_exact("backend") == {"/m/auth.md"}
        assert sample_trie.query_exact("backend.database") == set()
        assert sample_trie.children("backend") == ["backend.auth"]

    def test_empty_nodes_pruned(self, sample_trie):
        """Nodes with no documents disappear from tag listings."""
        sample_trie.remove("/m/auth.md", ["backend.auth", "security"])
        assert sorted(sample_trie.get_all_tags()) == [
            "backend",
            "backend.database",
            "backend.performance",
        ]
        assert sample_trie.children() == ["backend"]

    def test_unknown_combination_ignored(self, sample_trie):
        """Removing tags a document never had is a no-op."""
        before = sorted(sample_trie.get_all_tags())
        sample_trie.remove("/m/db.md", ["security"])
        sample_trie.remove("/m/missing.md", ["backend"])
        assert sorted(sample_trie.get_all_tags()) == before
        assert sample_trie.query_exact("security") == {"/m/auth.md"}

    def test_readd_after_remove(self):
        """A pruned branch can be rebuilt."""
        trie = TagTrie()
        trie.add("/m/a.md", ["x.y"])
        trie.remove("/m/a.md", ["x.y"])
        trie.add("/m/a.md", ["x.y"])
        assert trie.query_wildcard("x.*") == {"/m/a.md"}


class TestIntrospection:
    """Listing and counting helpers."""

    def test_all_tags_include_prefixes(self, sample_trie):
        """Intermediate prefixes are tags in their own right."""
        assert sorted(sample_trie.get_all_tags()) == [
            "backend",
            "backend.auth",
            "backend.database",
            "backend.performance",
            "security",
        ]

    def test_tags_for_document(self, sample_trie):
        """Every tag path holding a document is listed for it."""
        assert sorted(sample_trie.get_tags_for_document("/m/auth.md")) == [
            "backend",
            "backend.auth",
            "security",
        ]

    def test_count(self, sample_trie):
        """count is the size of the exact query."""
        assert sample_trie.count("backend") == 2
        assert sample_trie.count("security") == 1
        assert sample_trie.count("nope") == 0

    def test_children(self, sample_trie):
        """children lists full paths one level down."""
        assert sorted(sample_trie.children("backend")) == [
            "backend.auth",
            "backend.database",
            "backend.performance",
        ]
        assert sorted(sample_trie.children()) == ["backend", "security"]
        assert sample_trie.children("missing.tag") == []

    def test_documents(self, sample_trie):
        """The root holds every tagged document."""
        assert sample_trie.documents == {"/m/db.md", "/m/auth.md"}

    def test_clear(self, sample_trie):
        """clear empties everything."""
        sample_trie.clear()
        assert sample_trie.get_all_tags() == []
        assert sample_trie.query_wildcard("**") == set()
