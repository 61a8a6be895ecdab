"""
Common type definitions for the Tavily tools.

TypedDict definitions describing the normalized payloads returned to callers.
"""

from typing import Any, NotRequired, TypedDict


class SearchResultItem(TypedDict):
    """Individual search result."""

    title: str
    url: str
    snippet: str
    score: float | None
    rawContent: NotRequired[str]
    siteName: NotRequired[str]


class SearchPayload(TypedDict):
    """Normalized search response."""

    query: str
    provider: str
    searchDepth: str
    topic: str
    count: int
    tookMs: int
    tavilyResponseTime: Any
    results: list[SearchResultItem]
    answer: NotRequired[str]
    images: NotRequired[list[Any]]
    cached: NotRequired[bool]


class ExtractResultItem(TypedDict):
    url: str
    rawContent: str
    images: NotRequired[list[Any]]


class FailedExtraction(TypedDict):
    url: str
    error: str


class ExtractPayload(TypedDict):
    provider: str
    count: int
    tookMs: int
    tavilyResponseTime: Any
    results: list[ExtractResultItem]
    failedResults: list[FailedExtraction]


class CrawlResultItem(TypedDict):
    url: str
    rawContent: str


class CrawlPayload(TypedDict):
    provider: str
    baseUrl: str
    count: int
    tookMs: int
    tavilyResponseTime: Any
    results: list[CrawlResultItem]


class MapPayload(TypedDict):
    provider: str
    baseUrl: str
    count: int
    tookMs: int
    tavilyResponseTime: Any
    results: list[str]


class ResearchSource(TypedDict):
    title: str
    url: str


class ResearchPayload(TypedDict):
    """Final research report."""

    provider: str
    input: str
    model: str
    requestId: str | None
    status: str
    output: str
    sources: list[ResearchSource]
    tookMs: int


class ErrorPayload(TypedDict):
    """Structured failure returned instead of raising."""

    error: str
    message: str
    status: NotRequired[int]
    request_id: NotRequired[str]
    waited_seconds: NotRequired[float]
    details: NotRequired[Any]
