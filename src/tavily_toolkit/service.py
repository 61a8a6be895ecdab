"""
Tavily Tool Service

The shared core behind every host surface (MCP server, Strands tools, CLI).
Each operation resolves its parameters, consults the cache where applicable,
calls the provider and returns a normalized payload. Failures come back as
payloads with an ``error`` code; nothing is raised to the host.
"""

import copy
import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlparse

import httpx

from .builder import (
    MissingParameterError,
    build_crawl_request,
    build_extract_request,
    build_map_request,
    build_research_request,
    build_search_request,
)
from .cache import ResponseCache
from .client import ApiError, ProviderResult, Success, TavilyClient, TransportError
from .research import ResearchFailed, ResearchPoller, ResearchResult, ResearchTimeout
from .settings import Settings
from .types import (
    CrawlPayload,
    ErrorPayload,
    ExtractPayload,
    MapPayload,
    ResearchPayload,
    SearchPayload,
    SearchResultItem,
)

PROVIDER = "tavily"

logger = logging.getLogger(__name__)


def to_json(payload: Mapping[str, Any]) -> str:
    """Serialize a payload the way every tool returns it."""
    return json.dumps(payload, indent=2, ensure_ascii=False)


def site_name(url: str) -> str | None:
    try:
        return urlparse(url).hostname or None
    except ValueError:
        return None


def error_payload(code: str, message: str, **extra: Any) -> ErrorPayload:
    payload: dict[str, Any] = {"error": code, "message": message}
    payload.update(extra)
    return payload  # type: ignore[return-value]


def provider_error(result: ProviderResult | ResearchResult) -> ErrorPayload:
    """Convert a failed provider or research outcome into an error payload."""
    if isinstance(result, ApiError):
        return error_payload("tavily_api_error", result.message, status=result.status)
    if isinstance(result, TransportError):
        return error_payload("tavily_fetch_error", result.message)
    if isinstance(result, ResearchFailed):
        return error_payload(
            "tavily_research_failed",
            f"Research task failed: {json.dumps(result.payload, ensure_ascii=False)}",
            request_id=result.request_id,
            details=result.payload,
        )
    if isinstance(result, ResearchTimeout):
        return error_payload(
            "tavily_research_timeout",
            f"Research task timed out after {round(result.waited)}s. "
            f"Request ID: {result.request_id}",
            request_id=result.request_id,
            waited_seconds=round(result.waited, 1),
        )
    raise TypeError(f"Not an error result: {result!r}")


def _elapsed_ms(start: float) -> int:
    return round((time.monotonic() - start) * 1000)


def _records(value: Any) -> list[dict[str, Any]]:
    """Entries of a provider list that are objects; anything else is skipped."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


class TavilyService:
    """Executes Tavily operations for tool invocations."""

    def __init__(
        self,
        settings: Settings,
        client: TavilyClient,
        cache: ResponseCache,
        poller: ResearchPoller | None = None,
    ):
        self.settings = settings
        self.client = client
        self.cache = cache
        self.poller = poller or ResearchPoller(
            client,
            poll_interval=settings.research_poll_interval_seconds,
            max_wait=settings.research_max_wait_seconds,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, params: Mapping[str, Any]) -> SearchPayload | ErrorPayload:
        try:
            request = build_search_request(params, self.settings)
        except MissingParameterError as e:
            return error_payload(e.code, e.message)

        cache_key = request.cache_key()
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info('Cache hit for "%s"', request.query)
            return {**copy.deepcopy(cached), "cached": True}

        start = time.monotonic()
        result = await self.client.execute("search", request.to_body())
        if not isinstance(result, Success):
            return provider_error(result)

        data = result.body
        results: list[SearchResultItem] = []
        for item in _records(data.get("results")):
            url = str(item.get("url") or "")
            entry: SearchResultItem = {
                "title": item.get("title") or "",
                "url": url,
                "snippet": item.get("content") or "",
                "score": item.get("score"),
            }
            if request.include_raw_content and item.get("raw_content"):
                entry["rawContent"] = item["raw_content"]
            host = site_name(url)
            if host:
                entry["siteName"] = host
            results.append(entry)

        took_ms = _elapsed_ms(start)
        payload: SearchPayload = {
            "query": data.get("query") or request.query,
            "provider": PROVIDER,
            "searchDepth": request.search_depth,
            "topic": request.topic,
            "count": len(results),
            "tookMs": took_ms,
            "tavilyResponseTime": data.get("response_time"),
            "results": results,
        }
        if request.include_answer and data.get("answer"):
            payload["answer"] = data["answer"]
        if data.get("images"):
            payload["images"] = data["images"]

        self.cache.put(cache_key, copy.deepcopy(payload), self.settings.cache_ttl_seconds)
        logger.info(
            '"%s" -> %d results in %dms (depth=%s)',
            request.query,
            len(results),
            took_ms,
            request.search_depth,
        )
        return payload

    # ------------------------------------------------------------------
    # Extract / crawl / map
    # ------------------------------------------------------------------

    async def extract(self, params: Mapping[str, Any]) -> ExtractPayload | ErrorPayload:
        try:
            request = build_extract_request(params)
        except MissingParameterError as e:
            return error_payload(e.code, e.message)

        start = time.monotonic()
        result = await self.client.execute("extract", request.to_body())
        if not isinstance(result, Success):
            return provider_error(result)

        data = result.body
        results = []
        for item in _records(data.get("results")):
            entry = {
                "url": str(item.get("url") or "").strip(),
                "rawContent": str(item.get("raw_content") or "").strip(),
            }
            if item.get("images"):
                entry["images"] = item["images"]
            results.append(entry)

        failed = [
            {"url": str(f.get("url") or ""), "error": str(f.get("error") or "")}
            for f in _records(data.get("failed_results"))
        ]
        return {
            "provider": PROVIDER,
            "count": len(results),
            "tookMs": _elapsed_ms(start),
            "tavilyResponseTime": data.get("response_time"),
            "results": results,
            "failedResults": failed,
        }

    async def crawl(self, params: Mapping[str, Any]) -> CrawlPayload | ErrorPayload:
        try:
            request = build_crawl_request(params)
        except MissingParameterError as e:
            return error_payload(e.code, e.message)

        start = time.monotonic()
        result = await self.client.execute("crawl", request.to_body())
        if not isinstance(result, Success):
            return provider_error(result)

        data = result.body
        results = [
            {
                "url": str(item.get("url") or "").strip(),
                "rawContent": str(item.get("raw_content") or "").strip(),
            }
            for item in _records(data.get("results"))
        ]
        return {
            "provider": PROVIDER,
            "baseUrl": data.get("base_url") or request.url,
            "count": len(results),
            "tookMs": _elapsed_ms(start),
            "tavilyResponseTime": data.get("response_time"),
            "results": results,
        }

    async def map(self, params: Mapping[str, Any]) -> MapPayload | ErrorPayload:
        try:
            request = build_map_request(params)
        except MissingParameterError as e:
            return error_payload(e.code, e.message)

        start = time.monotonic()
        result = await self.client.execute("map", request.to_body())
        if not isinstance(result, Success):
            return provider_error(result)

        data = result.body
        raw_urls = data.get("results")
        if not isinstance(raw_urls, list):
            raw_urls = []
        urls = [u for u in raw_urls if isinstance(u, str) and u]
        return {
            "provider": PROVIDER,
            "baseUrl": data.get("base_url") or request.url,
            "count": len(urls),
            "tookMs": _elapsed_ms(start),
            "tavilyResponseTime": data.get("response_time"),
            "results": urls,
        }

    # ------------------------------------------------------------------
    # Research
    # ------------------------------------------------------------------

    async def research(
        self,
        params: Mapping[str, Any],
        progress_callback: Callable[..., None] | None = None,
    ) -> ResearchPayload | ErrorPayload:
        try:
            request = build_research_request(params, self.settings)
        except MissingParameterError as e:
            return error_payload(e.code, e.message)

        start = time.monotonic()
        result = await self.poller.run(
            request.to_body(),
            max_wait=request.max_wait,
            progress_callback=progress_callback,
        )
        if not isinstance(result, Success):
            return provider_error(result)

        data = result.body
        sources = [
            {
                "title": str(s.get("title") or "").strip(),
                "url": str(s.get("url") or "").strip(),
            }
            for s in _records(data.get("sources"))
        ]
        return {
            "provider": PROVIDER,
            "input": request.input,
            "model": request.model,
            "requestId": data.get("request_id"),
            "status": data.get("status") or "completed",
            "output": data.get("output") or data.get("content") or "",
            "sources": sources,
            "tookMs": _elapsed_ms(start),
        }

    # ------------------------------------------------------------------
    # JSON-text entry points used by the tool surfaces
    # ------------------------------------------------------------------

    async def run_tool(self, operation: str, params: Mapping[str, Any]) -> str:
        """Run an operation by name and return its payload as JSON text."""
        handlers = {
            "search": self.search,
            "extract": self.extract,
            "crawl": self.crawl,
            "map": self.map,
            "research": self.research,
        }
        payload = await handlers[operation](params)
        return to_json(payload)

    def close(self) -> None:
        self.cache.clear()
        logger.info("Tavily service stopped, cache cleared")


def build_service(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> TavilyService | None:
    """
    Create the process-wide service, or None when no API key is configured.

    Args:
        settings: Resolved settings
        transport: Optional httpx transport passed to the client

    Returns:
        A ready service, or None to signal the tools should stay idle
    """
    if not settings.has_api_key:
        logger.warning(
            "No Tavily API key found. Set TAVILY_API_KEY to enable the tools. Idle."
        )
        return None

    client = TavilyClient(
        settings.api_key,
        base_url=settings.base_url,
        timeout=settings.timeout_seconds,
        legacy_body_auth=settings.legacy_body_auth,
        transport=transport,
    )
    cache = ResponseCache(max_entries=settings.cache_max_entries)
    logger.info(
        "Tavily initialized (depth=%s, maxResults=%d, answer=%s, rawContent=%s, "
        "timeout=%ss, cacheTtl=%smin)",
        settings.search_depth,
        settings.max_results,
        settings.include_answer,
        settings.include_raw_content,
        settings.timeout_seconds,
        settings.cache_ttl_minutes,
    )
    return TavilyService(settings, client, cache)
