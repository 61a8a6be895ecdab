"""
Unit tests for the CLI text formatters.
"""

from tavily_toolkit.formatter import (
    format_crawl,
    format_extract,
    format_map,
    format_research,
    format_search,
)


class TestFormatter:
    """Test suite for payload rendering."""

    def test_format_search(self):
        """Test answer, sources, relevance and snippet truncation."""
        payload = {
            "answer": "Short answer.",
            "results": [
                {"title": "First", "url": "https://a.com", "snippet": "x" * 400, "score": 0.876},
                {"title": "", "url": "https://skipped.com", "snippet": "no title"},
                {"title": "Second", "url": "https://b.com", "snippet": "", "score": None},
            ],
        }

        text = format_search(payload)

        assert text.startswith("## Answer\n\nShort answer.")
        assert "- **First** (relevance: 88%)" in text
        assert "  " + "x" * 300 + "..." in text
        assert "skipped.com" not in text
        assert "- **Second**\n  https://b.com" in text

    def test_format_search_without_answer(self):
        """Test the answer section is omitted when absent."""
        text = format_search({"results": []})
        assert text.startswith("## Sources")

    def test_format_extract(self):
        """Test extracted pages and failed URLs."""
        text = format_extract(
            {
                "results": [
                    {"url": "https://a.com", "rawContent": "Body A"},
                    {"url": "https://c.com", "rawContent": ""},
                ],
                "failedResults": [{"url": "https://b.com", "error": "timeout"}],
            }
        )

        assert "# https://a.com\n\nBody A" in text
        assert "(no content extracted)" in text
        assert "## Failed URLs" in text
        assert "- https://b.com: timeout" in text

    def test_format_crawl_truncates(self):
        """Test long crawl pages are truncated to a preview."""
        text = format_crawl(
            {
                "baseUrl": "https://docs.example.com",
                "results": [{"url": "https://docs.example.com/a", "rawContent": "y" * 2500}],
            }
        )

        assert text.startswith("## Crawl: https://docs.example.com\n\nFound 1 page(s)")
        assert "### https://docs.example.com/a" in text
        assert "... (truncated)" in text
        assert "y" * 2001 not in text

    def test_format_map(self):
        """Test the URL listing."""
        text = format_map({"baseUrl": "https://e.com", "results": ["https://e.com/a"]})

        assert "## Site Map: https://e.com" in text
        assert "Found 1 URL(s)" in text
        assert "- https://e.com/a" in text

    def test_format_research(self):
        """Test report text and source list."""
        text = format_research(
            {
                "output": "The report.",
                "sources": [
                    {"title": "Paper", "url": "https://p.com"},
                    {"title": "", "url": "https://q.com"},
                    {"title": "No URL", "url": ""},
                ],
            }
        )

        assert text.startswith("## Research Report\n\nThe report.")
        assert "- **Paper**: https://p.com" in text
        assert "- https://q.com" in text
        assert "No URL" not in text
