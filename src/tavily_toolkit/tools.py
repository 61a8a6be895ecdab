"""
Tavily Tools for Agents

Strands tools that expose the Tavily operations to in-process agents. Every
tool returns the normalized payload as JSON text, including failures.
"""

from typing import Any

from strands import tool

from .service import TavilyService


def tool_params(**kwargs: Any) -> dict[str, Any]:
    """Drop arguments the caller left unset so defaults apply."""
    return {key: value for key, value in kwargs.items() if value is not None}


def create_tavily_tools(service: TavilyService | None) -> list:
    """Create Tavily tools bound to ``service``; none when it is idle."""
    if service is None:
        return []

    @tool
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
        Search the web with Tavily. Returns titles, URLs, content snippets,
        relevance scores and an optional AI-generated answer.

        Args:
            query: Search query string
            count: Number of results to return (1-20)
            search_depth: "basic" (fast, cheaper) or "advanced" (thorough)
            include_answer: Include an AI-generated short answer
            include_raw_content: Include raw page content in results
            topic: "general", "news" or "finance"
            days: Number of days back to search (only for topic=news)
            time_range: "day", "week", "month" or "year"
            start_date: Only results published after this date (YYYY-MM-DD)
            end_date: Only results published before this date (YYYY-MM-DD)
            include_domains: Limit results to these domains
            exclude_domains: Exclude results from these domains
            include_images: Include related image URLs
            chunks_per_source: Content chunks per source (1-3, advanced depth only)
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

    @tool
    async def tavily_extract(
        urls: list[str],
        format: str | None = None,
        extract_depth: str | None = None,
        query: str | None = None,
        include_images: bool | None = None,
        chunks_per_source: int | None = None,
    ) -> str:
        """
        Extract the readable content of one or more web pages.

        Args:
            urls: URLs to extract (up to 20)
            format: "markdown" or "text"
            extract_depth: "basic" or "advanced"
            query: Optional query used to rerank extracted chunks
            include_images: Include image URLs found on the pages
            chunks_per_source: Chunks kept per page when a query is given (1-5)
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

    @tool
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
        Crawl a website from a root URL and return the content of the pages found.

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

    @tool
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
        List the URLs of a website without extracting their content.

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

    @tool
    async def tavily_research(
        input: str,
        model: str | None = None,
        citation_format: str | None = None,
        max_wait: int | None = None,
    ) -> str:
        """
        Run a Tavily deep-research task and wait for its report.

        This can take a couple of minutes. The result contains the report text
        and its sources, or an error with the request id if the wait budget ran out.

        Args:
            input: The research question
            model: "mini", "pro" or "auto"
            citation_format: "numbered", "mla", "apa" or "chicago"
            max_wait: Seconds to wait for the report (10-150)
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

    return [tavily_search, tavily_extract, tavily_crawl, tavily_map, tavily_research]
