"""
Request Builder

Turns raw tool parameters plus configured defaults into fully resolved
request objects. Numeric values are floored and clamped, unknown enum values
fall back to defaults, and only a missing required field is reported.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .settings import (
    ANSWER_MODES,
    MAX_RESEARCH_WAIT_SECONDS,
    MAX_RESULTS_CAP,
    MIN_RESEARCH_WAIT_SECONDS,
    RAW_CONTENT_MODES,
    SEARCH_DEPTHS,
    Settings,
)

TOPICS = ("general", "news", "finance")
TIME_RANGES = ("day", "week", "month", "year", "d", "w", "m", "y")
EXTRACT_DEPTHS = ("basic", "advanced")
CONTENT_FORMATS = ("markdown", "text")
RESEARCH_MODELS = ("mini", "pro", "auto")
CITATION_FORMATS = ("numbered", "mla", "apa", "chicago")

MAX_EXTRACT_URLS = 20
MAX_CRAWL_DEPTH = 5
MAX_CRAWL_BREADTH = 500
MAX_CRAWL_LIMIT = 500
MAX_SEARCH_CHUNKS = 3
MAX_EXTRACT_CHUNKS = 5

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class MissingParameterError(ValueError):
    """A required parameter was empty or absent."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    @property
    def code(self) -> str:
        return f"missing_{self.field}"


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def clamp_int(value: Any, low: int, high: int) -> int | None:
    """Floor a finite number into ``[low, high]``; None for non-numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return max(low, min(high, math.floor(value)))


def pick(value: Any, options: tuple[str, ...], default: str) -> str:
    """Return ``value`` if it is one of ``options``, otherwise ``default``."""
    if isinstance(value, str) and value in options:
        return value
    return default


def clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def clean_list(value: Any) -> list[str]:
    """Keep the non-blank strings of a list, stripped."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _flag(value: Any, modes: tuple[str, ...], default: bool | str) -> bool | str:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in modes:
        return value
    return default


def _date(value: Any) -> str | None:
    text = clean_text(value)
    return text if _DATE_PATTERN.match(text) else None


# ---------------------------------------------------------------------------
# Request objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchRequest:
    query: str
    max_results: int
    search_depth: str
    include_answer: bool | str
    include_raw_content: bool | str
    topic: str = "general"
    days: int | None = None
    time_range: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    include_domains: tuple[str, ...] = ()
    exclude_domains: tuple[str, ...] = ()
    include_images: bool = False
    chunks_per_source: int | None = None

    def cache_key(self) -> str:
        """Fingerprint of every field that changes the provider response."""
        parts = [
            "tavily",
            self.query,
            self.max_results,
            self.search_depth,
            self.include_answer,
            self.include_raw_content,
            self.topic,
            self.days if self.days is not None else "default",
            self.time_range or "",
            self.start_date or "",
            self.end_date or "",
            ",".join(sorted(self.include_domains)),
            ",".join(sorted(self.exclude_domains)),
            self.include_images,
            self.chunks_per_source if self.chunks_per_source is not None else "",
        ]
        return ":".join(str(part) for part in parts).lower()

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "query": self.query,
            "search_depth": self.search_depth,
            "max_results": self.max_results,
            "include_answer": self.include_answer,
            "include_raw_content": self.include_raw_content,
            "topic": self.topic,
        }
        if self.days is not None:
            body["days"] = self.days
        if self.time_range:
            body["time_range"] = self.time_range
        if self.start_date:
            body["start_date"] = self.start_date
        if self.end_date:
            body["end_date"] = self.end_date
        if self.include_domains:
            body["include_domains"] = list(self.include_domains)
        if self.exclude_domains:
            body["exclude_domains"] = list(self.exclude_domains)
        if self.include_images:
            body["include_images"] = True
        if self.chunks_per_source is not None:
            body["chunks_per_source"] = self.chunks_per_source
        return body


@dataclass(frozen=True)
class ExtractRequest:
    urls: tuple[str, ...]
    extract_depth: str = "basic"
    format: str = "markdown"
    query: str | None = None
    include_images: bool = False
    chunks_per_source: int | None = None

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "urls": list(self.urls),
            "extract_depth": self.extract_depth,
            "format": self.format,
        }
        if self.query:
            body["query"] = self.query
        if self.include_images:
            body["include_images"] = True
        if self.chunks_per_source is not None:
            body["chunks_per_source"] = self.chunks_per_source
        return body


@dataclass(frozen=True)
class MapRequest:
    url: str
    max_depth: int | None = None
    max_breadth: int | None = None
    limit: int | None = None
    instructions: str | None = None
    select_paths: tuple[str, ...] = ()
    exclude_paths: tuple[str, ...] = ()
    select_domains: tuple[str, ...] = ()
    exclude_domains: tuple[str, ...] = ()
    allow_external: bool | None = None

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"url": self.url}
        if self.max_depth is not None:
            body["max_depth"] = self.max_depth
        if self.max_breadth is not None:
            body["max_breadth"] = self.max_breadth
        if self.limit is not None:
            body["limit"] = self.limit
        if self.instructions:
            body["instructions"] = self.instructions
        for name in ("select_paths", "exclude_paths", "select_domains", "exclude_domains"):
            values = getattr(self, name)
            if values:
                body[name] = list(values)
        if self.allow_external is not None:
            body["allow_external"] = self.allow_external
        return body


@dataclass(frozen=True)
class CrawlRequest(MapRequest):
    extract_depth: str | None = None
    format: str | None = None
    chunks_per_source: int | None = None

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.extract_depth:
            body["extract_depth"] = self.extract_depth
        if self.format:
            body["format"] = self.format
        if self.chunks_per_source is not None:
            body["chunks_per_source"] = self.chunks_per_source
        return body


@dataclass(frozen=True)
class ResearchRequest:
    input: str
    model: str = "auto"
    citation_format: str = "numbered"
    max_wait: float = MAX_RESEARCH_WAIT_SECONDS

    def to_body(self) -> dict[str, Any]:
        # max_wait is a local polling budget and is never sent
        return {
            "input": self.input,
            "model": self.model,
            "citation_format": self.citation_format,
        }


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def build_search_request(params: Mapping[str, Any], settings: Settings) -> SearchRequest:
    """
    Resolve search parameters against the configured defaults.

    Raises:
        MissingParameterError: If the query is empty after trimming
    """
    query = clean_text(params.get("query"))
    if not query:
        raise MissingParameterError("query", "A non-empty query string is required.")

    count = clamp_int(params.get("count", params.get("max_results")), 1, MAX_RESULTS_CAP)
    search_depth = pick(params.get("search_depth"), SEARCH_DEPTHS, settings.search_depth)
    topic = pick(params.get("topic"), TOPICS, "general")

    days = None
    if topic == "news":
        days = clamp_int(params.get("days"), 0, 3650)
        if not days:
            days = None

    time_range = params.get("time_range")
    chunks = None
    if search_depth == "advanced":
        chunks = clamp_int(params.get("chunks_per_source"), 1, MAX_SEARCH_CHUNKS)

    return SearchRequest(
        query=query,
        max_results=count if count is not None else settings.max_results,
        search_depth=search_depth,
        include_answer=_flag(
            params.get("include_answer"), ANSWER_MODES, settings.include_answer
        ),
        include_raw_content=_flag(
            params.get("include_raw_content"),
            RAW_CONTENT_MODES,
            settings.include_raw_content,
        ),
        topic=topic,
        days=days,
        time_range=time_range if time_range in TIME_RANGES else None,
        start_date=_date(params.get("start_date")),
        end_date=_date(params.get("end_date")),
        include_domains=tuple(clean_list(params.get("include_domains"))),
        exclude_domains=tuple(clean_list(params.get("exclude_domains"))),
        include_images=params.get("include_images") is True,
        chunks_per_source=chunks,
    )


def build_extract_request(params: Mapping[str, Any]) -> ExtractRequest:
    """
    Resolve extract parameters.

    Raises:
        MissingParameterError: If no usable URL was given
    """
    raw_urls = params.get("urls")
    if isinstance(raw_urls, str):
        raw_urls = [raw_urls]
    urls = clean_list(raw_urls)[:MAX_EXTRACT_URLS]
    if not urls:
        raise MissingParameterError("urls", "At least one URL is required.")

    query = clean_text(params.get("query")) or None
    chunks = None
    if query:
        chunks = clamp_int(params.get("chunks_per_source"), 1, MAX_EXTRACT_CHUNKS)

    return ExtractRequest(
        urls=tuple(urls),
        extract_depth=pick(params.get("extract_depth"), EXTRACT_DEPTHS, "basic"),
        format=pick(params.get("format"), CONTENT_FORMATS, "markdown"),
        query=query,
        include_images=params.get("include_images") is True,
        chunks_per_source=chunks,
    )


def _site_fields(params: Mapping[str, Any]) -> dict[str, Any]:
    url = clean_text(params.get("url"))
    if not url:
        raise MissingParameterError("url", "A non-empty root URL is required.")

    allow_external = params.get("allow_external")
    return {
        "url": url,
        "max_depth": clamp_int(params.get("max_depth"), 1, MAX_CRAWL_DEPTH),
        "max_breadth": clamp_int(params.get("max_breadth"), 1, MAX_CRAWL_BREADTH),
        "limit": clamp_int(params.get("limit"), 1, MAX_CRAWL_LIMIT),
        "instructions": clean_text(params.get("instructions")) or None,
        "select_paths": tuple(clean_list(params.get("select_paths"))),
        "exclude_paths": tuple(clean_list(params.get("exclude_paths"))),
        "select_domains": tuple(clean_list(params.get("select_domains"))),
        "exclude_domains": tuple(clean_list(params.get("exclude_domains"))),
        "allow_external": allow_external if isinstance(allow_external, bool) else None,
    }


def build_map_request(params: Mapping[str, Any]) -> MapRequest:
    """
    Resolve site-map parameters.

    Raises:
        MissingParameterError: If the root URL is empty
    """
    return MapRequest(**_site_fields(params))


def build_crawl_request(params: Mapping[str, Any]) -> CrawlRequest:
    """
    Resolve crawl parameters.

    Raises:
        MissingParameterError: If the root URL is empty
    """
    fields = _site_fields(params)
    extract_depth = params.get("extract_depth")
    content_format = params.get("format")
    chunks = None
    if fields["instructions"]:
        chunks = clamp_int(params.get("chunks_per_source"), 1, MAX_EXTRACT_CHUNKS)

    return CrawlRequest(
        **fields,
        extract_depth=extract_depth if extract_depth in EXTRACT_DEPTHS else None,
        format=content_format if content_format in CONTENT_FORMATS else None,
        chunks_per_source=chunks,
    )


def build_research_request(
    params: Mapping[str, Any], settings: Settings
) -> ResearchRequest:
    """
    Resolve research parameters.

    Raises:
        MissingParameterError: If the research question is empty
    """
    question = clean_text(params.get("input"))
    if not question:
        raise MissingParameterError("input", "A non-empty research question is required.")

    max_wait = params.get("max_wait")
    if isinstance(max_wait, bool) or not isinstance(max_wait, (int, float)) or not math.isfinite(max_wait):
        wait = settings.research_max_wait_seconds
    else:
        wait = max(MIN_RESEARCH_WAIT_SECONDS, min(MAX_RESEARCH_WAIT_SECONDS, float(max_wait)))

    return ResearchRequest(
        input=question,
        model=pick(params.get("model"), RESEARCH_MODELS, "auto"),
        citation_format=pick(params.get("citation_format"), CITATION_FORMATS, "numbered"),
        max_wait=wait,
    )
