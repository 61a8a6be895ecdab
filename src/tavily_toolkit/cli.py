"""
Tavily command line scripts

One console script per operation. Results are printed to stdout as readable
text, diagnostics go to stderr. Exit status is 2 for usage errors and 1 for a
missing API key or a failed operation.
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable, Sequence
from typing import Any

from .formatter import FORMATTERS
from .logger import setup_logging
from .service import TavilyService, build_service
from .settings import Settings, get_settings


def _search_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tavily-search",
        description="Search the web with Tavily",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tavily-search "python async programming"
  tavily-search "AI regulation" --topic news --days 7 -n 10
        """,
    )
    parser.add_argument("query", help="Search query")
    parser.add_argument("-n", type=int, default=5, dest="count", help="Number of results (1-20)")
    parser.add_argument("--deep", action="store_true", help="Use advanced search depth")
    parser.add_argument("--topic", default="general", help="general, news or finance")
    parser.add_argument("--days", type=int, help="Days back to search (news only)")
    parser.add_argument("--time-range", help="day, week, month or year")
    parser.add_argument("--include-domain", action="append", dest="include_domains")
    parser.add_argument("--exclude-domain", action="append", dest="exclude_domains")
    parser.add_argument("--raw", action="store_true", help="Include raw page content")
    return parser


def _extract_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tavily-extract", description="Extract page content with Tavily"
    )
    parser.add_argument("urls", nargs="+", help="URLs to extract")
    parser.add_argument("--format", default="markdown", help="markdown or text")
    parser.add_argument("--query", help="Rerank extracted chunks against this query")
    parser.add_argument("--depth", dest="extract_depth", help="basic or advanced")
    return parser


def _site_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument("url", help="Root URL")
    parser.add_argument("--depth", type=int, dest="max_depth", help="Link depth (1-5)")
    parser.add_argument("--breadth", type=int, dest="max_breadth", help="Links per page (1-500)")
    parser.add_argument("--limit", type=int, help="Maximum number of results")
    parser.add_argument("--instructions", help="Natural-language guidance")
    return parser


def _crawl_parser() -> argparse.ArgumentParser:
    parser = _site_parser("tavily-crawl", "Crawl a website with Tavily")
    parser.add_argument("--format", help="markdown or text")
    return parser


def _map_parser() -> argparse.ArgumentParser:
    return _site_parser("tavily-map", "Map the URLs of a website with Tavily")


def _research_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tavily-research", description="Run a Tavily deep-research task"
    )
    parser.add_argument("input", help="Research question")
    parser.add_argument("--model", help="mini, pro or auto")
    parser.add_argument("--citation-format", help="numbered, mla, apa or chicago")
    parser.add_argument("--max-wait", type=float, help="Seconds to wait (10-150)")
    return parser


def _search_params(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "query": args.query,
        "count": args.count,
        "search_depth": "advanced" if args.deep else "basic",
        "topic": args.topic,
        "days": args.days,
        "time_range": args.time_range,
        "include_domains": args.include_domains,
        "exclude_domains": args.exclude_domains,
        "include_answer": True,
        "include_raw_content": args.raw,
    }


def _research_progress(event_type: str, **kwargs: Any) -> None:
    if event_type == "research_created":
        sys.stderr.write(f"Research task {kwargs['request_id']}: polling")
    elif event_type == "research_polled":
        sys.stderr.write(".")
    elif event_type == "research_completed":
        sys.stderr.write(f" done ({round(kwargs['elapsed'])}s)\n")
    sys.stderr.flush()


async def _execute(
    service: TavilyService, operation: str, params: dict[str, Any]
) -> dict[str, Any]:
    if operation == "research":
        return await service.research(params, progress_callback=_research_progress)
    return await getattr(service, operation)(params)


def run(
    operation: str,
    parser: argparse.ArgumentParser,
    to_params: Callable[[argparse.Namespace], dict[str, Any]],
    argv: Sequence[str] | None = None,
    settings: Settings | None = None,
    service: TavilyService | None = None,
) -> int:
    """Parse ``argv``, run ``operation`` and print the result. Returns the exit code."""
    args = parser.parse_args(argv)

    if service is None:
        settings = settings or get_settings()
        if not settings.has_api_key:
            print("Missing TAVILY_API_KEY", file=sys.stderr)
            return 1
        setup_logging(logging.WARNING)
        service = build_service(settings)
        if service is None:
            return 1

    params = {key: value for key, value in to_params(args).items() if value is not None}
    payload = asyncio.run(_execute(service, operation, params))

    if "error" in payload:
        status = f" ({payload['status']})" if "status" in payload else ""
        print(
            f"Tavily {operation.capitalize()} failed{status}: {payload['message']}",
            file=sys.stderr,
        )
        return 1

    print(FORMATTERS[operation](payload))
    return 0


def search_main(argv: Sequence[str] | None = None, **kwargs: Any) -> int:
    return run("search", _search_parser(), _search_params, argv, **kwargs)


def extract_main(argv: Sequence[str] | None = None, **kwargs: Any) -> int:
    return run("extract", _extract_parser(), vars, argv, **kwargs)


def crawl_main(argv: Sequence[str] | None = None, **kwargs: Any) -> int:
    return run("crawl", _crawl_parser(), vars, argv, **kwargs)


def map_main(argv: Sequence[str] | None = None, **kwargs: Any) -> int:
    return run("map", _map_parser(), vars, argv, **kwargs)


def research_main(argv: Sequence[str] | None = None, **kwargs: Any) -> int:
    return run("research", _research_parser(), vars, argv, **kwargs)

