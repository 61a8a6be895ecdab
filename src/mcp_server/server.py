"""
Tavily MCP Server Implementation

Provides MCP tools for web search, page extraction, site crawling, site
mapping and deep research through the Tavily API.
"""

import logging

from mcp.server.fastmcp import FastMCP

from tavily_toolkit.logger import setup_logging
from tavily_toolkit.service import TavilyService, build_service
from tavily_toolkit.settings import Settings, get_settings
from tavily_toolkit.tools import tool_params

logger = logging.getLogger(__name__)


def register_tools(mcp: FastMCP, service: TavilyService) -> None:
    """Register the five Tavily tools on ``mcp``."""

    @mcp.tool()
    async def tavily_search(
        query: str,
        count: int | None = None,
        search_depth: str | None = None,
        include_answer: bool | None = None,
        include_raw_content: bool | None = None,
        topic: str | None = None,
        days: int | None = None,
        time_range: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        include_domains: list[str] | None = None,
        exclude_domains: list[str] | None = None,
        include_images: bool | None = None,
        chunks_per_source: int | None = None,
    ) -> str:
        """
        <tool_description>
        Search the web using the Tavily Search API. Returns structured results with
        titles, URLs, content snippets, relevance scores, and an optional
        AI-generated answer. Supports domain filtering and news-specific search.
        </tool_description>

        <tool_usage_guidelines>
        Use this tool for current facts, recent events and anything that needs
        sources. Prefer "basic" depth for quick lookups and "advanced" for thorough
        research. Identical searches within the cache window return the cached
        result marked with "cached": true.
        </tool_usage_guidelines>

        Args:
            query: Search query string
            count: Number of results to return (1-20). Default: from config
            search_depth: "basic" (fast, cheaper) or "advanced" (thorough)
            include_answer: Include an AI-generated short answer
            include_raw_content: Include raw page content in results
            topic: "general", "news" or "finance". Default: "general"
            days: Number of days back to search (only for topic=news)
            time_range: "day", "week", "month" or "year"
            start_date: Only results published after this date (YYYY-MM-DD)
            end_date: Only results published before this date (YYYY-MM-DD)
            include_domains: Limit results to these domains (e.g. ["arxiv.org"])
            exclude_domains: Exclude results from these domains
            include_images: Include related image URLs
            chunks_per_source: Content chunks per source (1-3, advanced depth only)

        Returns:
            JSON text with the results, or an "error" field on failure
        """
        return await service.run_tool(
            "search",
            tool_params(
                query=query,
                count=count,
                search_depth=search_depth,
                include_answer=include_answer,
                include_raw_content=include_raw_content,
                topic=topic,
                days=days,
                time_range=time_range,
                start_date=start_date,
                end_date=end_date,
                include_domains=include_domains,
                exclude_domains=exclude_domains,
                include_images=include_images,
                chunks_per_source=chunks_per_source,
            ),
        )

    @mcp.tool()
    async def tavily_extract(
        urls: list[str],
        format: str | None = None,
        extract_depth: str | None = None,
        query: str | None = None,
        include_images: bool | None = None,
        chunks_per_source: int | None = None,
    ) -> str:
        """
        <tool_description>
        Extract clean page content from one or more URLs.
        </tool_description>

        Args:
            urls: URLs to extract content from (up to 20)
            format: "markdown" or "text". Default: "markdown"
            extract_depth: "basic" or "advanced". Default: "basic"
            query: Optional query used to rerank the extracted chunks
            include_images: Include image URLs found on the pages
            chunks_per_source: Chunks kept per page when a query is given (1-5)

        Returns:
            JSON text with extracted pages and failed URLs
        """
        return await service.run_tool(
            "extract",
            tool_params(
                urls=urls,
                format=format,
                extract_depth=extract_depth,
                query=query,
                include_images=include_images,
                chunks_per_source=chunks_per_source,
            ),
        )

    @mcp.tool()
    async def tavily_crawl(
        url: str,
        max_depth: int | None = None,
        max_breadth: int | None = None,
        limit: int | None = None,
        instructions: str | None = None,
        select_paths: list[str] | None = None,
        exclude_paths: list[str] | None = None,
        select_domains: list[str] | None = None,
        exclude_domains: list[str] | None = None,
        allow_external: bool | None = None,
        extract_depth: str | None = None,
        format: str | None = None,
        chunks_per_source: int | None = None,
    ) -> str:
        """
        <tool_description>
        Crawl a website starting from a root URL and return the content of each
        page found.
        </tool_description>

        Args:
            url: Root URL to start crawling from
            max_depth: How many links deep to follow (1-5)
            max_breadth: Links followed per page (1-500)
            limit: Maximum number of pages to return
            instructions: Natural-language guidance for the crawler
            select_paths: Regex patterns of paths to include
            exclude_paths: Regex patterns of paths to skip
            select_domains: Regex patterns of domains to include
            exclude_domains: Regex patterns of domains to skip
            allow_external: Follow links to other domains
            extract_depth: "basic" or "advanced"
            format: "markdown" or "text"
            chunks_per_source: Chunks kept per page when instructions are given (1-5)

        Returns:
            JSON text with crawled pages
        """
        return await service.run_tool(
            "crawl",
            tool_params(
                url=url,
                max_depth=max_depth,
                max_breadth=max_breadth,
                limit=limit,
                instructions=instructions,
                select_paths=select_paths,
                exclude_paths=exclude_paths,
                select_domains=select_domains,
                exclude_domains=exclude_domains,
                allow_external=allow_external,
                extract_depth=extract_depth,
                format=format,
                chunks_per_source=chunks_per_source,
            ),
        )

    @mcp.tool()
    async def tavily_map(
        url: str,
        max_depth: int | None = None,
        max_breadth: int | None = None,
        limit: int | None = None,
        instructions: str | None = None,
        select_paths: list[str] | None = None,
        exclude_paths: list[str] | None = None,
        select_domains: list[str] | None = None,
        exclude_domains: list[str] | None = None,
        allow_external: bool | None = None,
    ) -> str:
        """
        <tool_description>
        Map the structure of a website: list its URLs without extracting content.
        </tool_description>

        Args:
            url: Root URL to map
            max_depth: How many links deep to follow (1-5)
            max_breadth: Links followed per page (1-500)
            limit: Maximum number of URLs to return
            instructions: Natural-language guidance for the mapper
            select_paths: Regex patterns of paths to include
            exclude_paths: Regex patterns of paths to skip
            select_domains: Regex patterns of domains to include
            exclude_domains: Regex patterns of domains to skip
            allow_external: Include links to other domains

        Returns:
            JSON text with the discovered URLs
        """
        return await service.run_tool(
            "map",
            tool_params(
                url=url,
                max_depth=max_depth,
                max_breadth=max_breadth,
                limit=limit,
                instructions=instructions,
                select_paths=select_paths,
                exclude_paths=exclude_paths,
                select_domains=select_domains,
                exclude_domains=exclude_domains,
                allow_external=allow_external,
            ),
        )

    @mcp.tool()
    async def tavily_research(
        input: str,
        model: str | None = None,
        citation_format: str | None = None,
        max_wait: int | None = None,
    ) -> str:
        """
        <tool_description>
        Run a Tavily deep-research task and return the finished report with its
        sources.
        </tool_description>

        <tool_usage_guidelines>
        Research tasks run remotely and this tool waits for them, polling every
        few seconds, for at most max_wait seconds (default 150). If the budget
        runs out the result is a "tavily_research_timeout" error carrying the
        request_id; the remote task keeps running.

        This tool is expensive, so ask the user for confirmation before running it.
        </tool_usage_guidelines>

        Args:
            input: The research question
            model: "mini", "pro" or "auto". Default: "auto"
            citation_format: "numbered", "mla", "apa" or "chicago". Default: "numbered"
            max_wait: Seconds to wait for the report (10-150)

        Returns:
            JSON text with the report and sources, or an "error" field on failure
        """
        return await service.run_tool(
            "research",
            tool_params(
                input=input,
                model=model,
                citation_format=citation_format,
                max_wait=max_wait,
            ),
        )


def create_server(
    settings: Settings | None = None, service: TavilyService | None = None
) -> FastMCP:
    """
    Create the FastMCP server.

    Without an API key the server starts idle and exposes no tools.
    """
    settings = settings or get_settings()
    mcp = FastMCP("Tavily")

    service = service or build_service(settings)
    if service is None:
        logger.info("Tavily MCP server idle (no API key)")
        return mcp

    register_tools(mcp, service)
    logger.info("Tavily MCP server ready")
    return mcp


def main() -> None:
    setup_logging()
    create_server().run()


if __name__ == "__main__":
    main()
