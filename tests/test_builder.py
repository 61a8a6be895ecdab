"""
Unit tests for the request builder.

Covers clamping, enum fallbacks, required-field errors and cache key
fingerprinting for every operation.
"""

import pytest

from tavily_toolkit.builder import (
    MissingParameterError,
    build_crawl_request,
    build_extract_request,
    build_map_request,
    build_research_request,
    build_search_request,
)


class TestSearchRequest:
    """Test cases for build_search_request."""

    def test_defaults_from_settings(self, settings):
        """Test unspecified parameters fall back to configuration."""
        request = build_search_request({"query": "  python asyncio  "}, settings)

        assert request.query == "python asyncio"
        assert request.max_results == 5
        assert request.search_depth == "advanced"
        assert request.include_answer is True
        assert request.include_raw_content is False
        assert request.topic == "general"
        assert request.days is None

    @pytest.mark.parametrize(
        "count, expected",
        [(0, 1), (999, 20), (7.9, 7), (-3, 1), (20, 20)],
    )
    def test_count_clamped(self, settings, count, expected):
        """Test result count is floored and clamped to [1, 20]."""
        request = build_search_request({"query": "q", "count": count}, settings)
        assert request.max_results == expected

    def test_non_numeric_count_uses_default(self, settings):
        """Test a non-numeric count is replaced by the configured default."""
        request = build_search_request({"query": "q", "count": "many"}, settings)
        assert request.max_results == settings.max_results

    @pytest.mark.parametrize("value", ["deep", "ADVANCED", 3, None])
    def test_invalid_depth_falls_back(self, settings, value):
        """Test unknown search depths are silently replaced."""
        request = build_search_request({"query": "q", "search_depth": value}, settings)
        assert request.search_depth == settings.search_depth

    def test_invalid_topic_falls_back(self, settings):
        """Test unknown topics become general."""
        request = build_search_request({"query": "q", "topic": "sports"}, settings)
        assert request.topic == "general"

    def test_days_only_for_news(self, settings):
        """Test days is kept for news searches only."""
        general = build_search_request({"query": "q", "days": 7}, settings)
        news = build_search_request({"query": "q", "topic": "news", "days": 7.5}, settings)

        assert general.days is None
        assert news.days == 7
        assert news.to_body()["days"] == 7
        assert "days" not in general.to_body()

    def test_answer_and_raw_content_modes(self, settings):
        """Test boolean-or-enum flags accept their named modes."""
        request = build_search_request(
            {"query": "q", "include_answer": "basic", "include_raw_content": "text"},
            settings,
        )
        assert request.include_answer == "basic"
        assert request.include_raw_content == "text"

        fallback = build_search_request(
            {"query": "q", "include_answer": "maybe", "include_raw_content": "html"},
            settings,
        )
        assert fallback.include_answer is True
        assert fallback.include_raw_content is False

    def test_chunks_only_with_advanced_depth(self, settings):
        """Test chunks_per_source is clamped to [1, 3] and needs advanced depth."""
        advanced = build_search_request(
            {"query": "q", "search_depth": "advanced", "chunks_per_source": 10}, settings
        )
        basic = build_search_request(
            {"query": "q", "search_depth": "basic", "chunks_per_source": 2}, settings
        )

        assert advanced.chunks_per_source == 3
        assert basic.chunks_per_source is None

    def test_date_filters(self, settings):
        """Test malformed dates and time ranges are dropped."""
        request = build_search_request(
            {
                "query": "q",
                "time_range": "week",
                "start_date": "2024-01-01",
                "end_date": "yesterday",
            },
            settings,
        )
        body = request.to_body()

        assert body["time_range"] == "week"
        assert body["start_date"] == "2024-01-01"
        assert "end_date" not in body

    def test_domains_filtered(self, settings):
        """Test blank and non-string domains are discarded."""
        request = build_search_request(
            {"query": "q", "include_domains": ["arxiv.org", " ", 42, " github.com "]},
            settings,
        )
        assert request.include_domains == ("arxiv.org", "github.com")
        assert "exclude_domains" not in request.to_body()

    @pytest.mark.parametrize("query", ["", "   ", None, 12])
    def test_missing_query(self, settings, query):
        """Test an empty query is the one surfaced validation error."""
        with pytest.raises(MissingParameterError) as exc_info:
            build_search_request({"query": query}, settings)

        assert exc_info.value.code == "missing_query"

    def test_does_not_mutate_settings(self, settings):
        """Test building a request leaves the defaults untouched."""
        before = settings.model_dump()
        build_search_request(
            {"query": "q", "count": 999, "search_depth": "basic"}, settings
        )
        assert settings.model_dump() == before


class TestCacheKey:
    """Test cases for the search cache fingerprint."""

    def test_key_independent_of_parameter_order(self, settings):
        """Test differently ordered parameter objects give identical keys."""
        first = {
            "query": "Climate Policy",
            "count": 8,
            "topic": "news",
            "days": 3,
            "include_domains": ["reuters.com", "apnews.com"],
        }
        second = {
            "include_domains": ["apnews.com", "reuters.com"],
            "days": 3,
            "topic": "news",
            "count": 8,
            "query": "Climate Policy",
        }

        key1 = build_search_request(first, settings).cache_key()
        key2 = build_search_request(second, settings).cache_key()

        assert key1 == key2

    def test_key_is_case_insensitive(self, settings):
        """Test query case does not change the fingerprint."""
        key1 = build_search_request({"query": "AWS Bedrock"}, settings).cache_key()
        key2 = build_search_request({"query": "aws bedrock"}, settings).cache_key()
        assert key1 == key2

    def test_key_changes_with_parameters(self, settings):
        """Test every response-affecting parameter is part of the key."""
        base = build_search_request({"query": "q"}, settings).cache_key()
        variants = [
            {"query": "q", "count": 9},
            {"query": "q", "search_depth": "basic"},
            {"query": "q", "topic": "finance"},
            {"query": "q", "include_answer": False},
            {"query": "q", "exclude_domains": ["example.com"]},
        ]
        for params in variants:
            assert build_search_request(params, settings).cache_key() != base


class TestExtractRequest:
    """Test cases for build_extract_request."""

    def test_defaults(self):
        """Test extract defaults and body shape."""
        request = build_extract_request({"urls": ["https://example.com"]})

        assert request.to_body() == {
            "urls": ["https://example.com"],
            "extract_depth": "basic",
            "format": "markdown",
        }

    def test_single_url_string_accepted(self):
        """Test a bare string is treated as one URL."""
        request = build_extract_request({"urls": " https://example.com "})
        assert request.urls == ("https://example.com",)

    def test_url_list_capped(self):
        """Test at most 20 URLs are sent."""
        urls = [f"https://example.com/{i}" for i in range(30)]
        assert len(build_extract_request({"urls": urls}).urls) == 20

    def test_invalid_enums_fall_back(self):
        """Test unknown format and depth values are replaced."""
        request = build_extract_request(
            {"urls": ["https://example.com"], "format": "html", "extract_depth": "max"}
        )
        assert request.format == "markdown"
        assert request.extract_depth == "basic"

    def test_chunks_require_query(self):
        """Test chunks_per_source is only sent alongside a query."""
        without = build_extract_request({"urls": ["u"], "chunks_per_source": 4})
        with_query = build_extract_request(
            {"urls": ["u"], "query": "pricing", "chunks_per_source": 9}
        )

        assert without.chunks_per_source is None
        assert with_query.chunks_per_source == 5
        assert with_query.to_body()["query"] == "pricing"

    @pytest.mark.parametrize("urls", [None, [], ["", "  "], "   "])
    def test_missing_urls(self, urls):
        """Test no usable URL yields missing_urls."""
        with pytest.raises(MissingParameterError) as exc_info:
            build_extract_request({"urls": urls})
        assert exc_info.value.code == "missing_urls"


class TestSiteRequests:
    """Test cases for crawl and map request building."""

    def test_crawl_depth_clamped(self):
        """Test a crawl depth of 7 resolves to 5."""
        request = build_crawl_request({"url": "https://docs.example.com", "max_depth": 7})
        assert request.max_depth == 5
        assert request.to_body()["max_depth"] == 5

    def test_crawl_breadth_and_limit_clamped(self):
        """Test breadth and limit are clamped to [1, 500]."""
        request = build_crawl_request(
            {"url": "https://example.com", "max_breadth": 9000, "limit": 0}
        )
        assert request.max_breadth == 500
        assert request.limit == 1

    def test_unset_numbers_omitted(self):
        """Test absent numeric options are left to the provider."""
        body = build_map_request({"url": "https://example.com"}).to_body()
        assert body == {"url": "https://example.com"}

    def test_crawl_format_and_chunks(self):
        """Test crawl-only options are validated."""
        request = build_crawl_request(
            {
                "url": "https://example.com",
                "format": "text",
                "extract_depth": "turbo",
                "instructions": "only API docs",
                "chunks_per_source": 0,
            }
        )
        body = request.to_body()

        assert body["format"] == "text"
        assert "extract_depth" not in body
        assert body["instructions"] == "only API docs"
        assert body["chunks_per_source"] == 1

    def test_map_passes_path_filters(self):
        """Test list filters and allow_external pass through."""
        body = build_map_request(
            {
                "url": "https://example.com",
                "select_paths": ["/docs/.*"],
                "allow_external": False,
            }
        ).to_body()

        assert body["select_paths"] == ["/docs/.*"]
        assert body["allow_external"] is False

    @pytest.mark.parametrize("builder", [build_crawl_request, build_map_request])
    def test_missing_url(self, builder):
        """Test an empty root URL yields missing_url."""
        with pytest.raises(MissingParameterError) as exc_info:
            builder({"url": "  "})
        assert exc_info.value.code == "missing_url"


class TestResearchRequest:
    """Test cases for build_research_request."""

    def test_defaults(self, settings):
        """Test research defaults and that max_wait is not sent."""
        request = build_research_request({"input": "State of fusion power"}, settings)

        assert request.model == "auto"
        assert request.citation_format == "numbered"
        assert request.max_wait == 150
        assert request.to_body() == {
            "input": "State of fusion power",
            "model": "auto",
            "citation_format": "numbered",
        }

    def test_invalid_enums_fall_back(self, settings):
        """Test unknown model and citation format values are replaced."""
        request = build_research_request(
            {"input": "q", "model": "ultra", "citation_format": "ieee"}, settings
        )
        assert request.model == "auto"
        assert request.citation_format == "numbered"

    @pytest.mark.parametrize("max_wait, expected", [(1, 10), (600, 150), (45, 45)])
    def test_max_wait_clamped(self, settings, max_wait, expected):
        """Test the wait budget is clamped to [10, 150] seconds."""
        request = build_research_request({"input": "q", "max_wait": max_wait}, settings)
        assert request.max_wait == expected

    def test_missing_input(self, settings):
        """Test an empty question yields missing_input."""
        with pytest.raises(MissingParameterError) as exc_info:
            build_research_request({"input": ""}, settings)
        assert exc_info.value.code == "missing_input"
