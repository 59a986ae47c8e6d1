"""Tests for index inspection views."""

from datetime import UTC, datetime

from mnemo.index import DocumentCache, TagTrie
from mnemo.inspection import dump_documents, render_tag_tree
from mnemo.models import DocumentRecord


class TestRenderTagTree:
    """Markdown tag listing."""

    def test_empty(self):
        """An empty trie has a friendly message."""
        assert render_tag_tree(TagTrie()) == "No tags found in the memory index.\n"

    def test_grouped_with_counts(self):
        """Tags are grouped by top level and indented by depth."""
        trie = TagTrie()
        trie.add("/m/a.md", ["backend.database"])
        trie.add("/m/b.md", ["backend.auth"])
        text = render_tag_tree(trie)

        assert "Total tags: 3" in text
        assert "## backend" in text
        assert "- backend (2 files)" in text
        assert "  - backend.auth (1 file)" in text
        assert text.index("backend.auth") < text.index("backend.database")


class TestDumpDocuments:
    """JSON-ready dump."""

    def test_preview_and_fields(self):
        """Long bodies are truncated; metadata is included."""
        cache = DocumentCache()
        stamp = datetime(2024, 5, 1, tzinfo=UTC)
        cache.add(DocumentRecord(
            path="/m/b.md", title="B", tags=["x"], body="y" * 250,
            extra_metadata={"priority": 1}, last_modified=stamp,
        ))
        cache.add(DocumentRecord(
            path="/m/a.md", title="A", tags=["x"], body="short", last_modified=stamp,
        ))

        dumped = dump_documents(cache)

        assert [d["path"] for d in dumped] == ["/m/a.md", "/m/b.md"]
        assert dumped[0]["content_preview"] == "short"
        assert dumped[1]["content_preview"] == "y" * 200 + "..."
        assert dumped[1]["metadata"] == {"priority": 1}
        assert dumped[0]["last_modified"] == stamp.isoformat()
