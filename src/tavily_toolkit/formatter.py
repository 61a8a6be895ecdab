"""
Human-readable rendering of tool payloads for the command line.
"""

from collections.abc import Mapping
from typing import Any

CRAWL_PREVIEW_CHARS = 2000
SNIPPET_PREVIEW_CHARS = 300


def _truncate(text: str, limit: int, marker: str = "...") -> str:
    return text[:limit] + (marker if len(text) > limit else "")


def format_search(payload: Mapping[str, Any]) -> str:
    lines: list[str] = []
    answer = payload.get("answer")
    if answer:
        lines += ["## Answer", "", answer, "", "---", ""]

    lines += ["## Sources", ""]
    for result in payload.get("results", []):
        title = str(result.get("title") or "").strip()
        url = str(result.get("url") or "").strip()
        if not title or not url:
            continue
        score = result.get("score")
        relevance = f" (relevance: {score * 100:.0f}%)" if score else ""
        lines.append(f"- **{title}**{relevance}")
        lines.append(f"  {url}")
        snippet = str(result.get("snippet") or "").strip()
        if snippet:
            lines.append(f"  {_truncate(snippet, SNIPPET_PREVIEW_CHARS)}")
        lines.append("")
    return "\n".join(lines)


def format_extract(payload: Mapping[str, Any]) -> str:
    lines: list[str] = []
    for result in payload.get("results", []):
        lines += [f"# {result.get('url', '')}", ""]
        lines.append(result.get("rawContent") or "(no content extracted)")
        lines += ["", "---", ""]

    failed = payload.get("failedResults") or []
    if failed:
        lines += ["## Failed URLs", ""]
        lines += [f"- {f.get('url', '')}: {f.get('error', '')}" for f in failed]
    return "\n".join(lines)


def format_crawl(payload: Mapping[str, Any]) -> str:
    results = payload.get("results", [])
    lines = [f"## Crawl: {payload.get('baseUrl', '')}", "", f"Found {len(results)} page(s)", ""]
    for result in results:
        lines += [f"### {result.get('url', '')}", ""]
        content = result.get("rawContent") or ""
        if content:
            lines.append(_truncate(content, CRAWL_PREVIEW_CHARS, "\n\n... (truncated)"))
        else:
            lines.append("(no content extracted)")
        lines += ["", "---", ""]
    return "\n".join(lines)


def format_map(payload: Mapping[str, Any]) -> str:
    urls = payload.get("results", [])
    lines = [f"## Site Map: {payload.get('baseUrl', '')}", "", f"Found {len(urls)} URL(s)", ""]
    lines += [f"- {url}" for url in urls]
    return "\n".join(lines) + "\n"


def format_research(payload: Mapping[str, Any]) -> str:
    lines = ["## Research Report", ""]
    output = payload.get("output")
    if output:
        lines += [output, ""]

    sources = [s for s in payload.get("sources", []) if s.get("url")]
    if sources:
        lines += ["---", "", "## Sources", ""]
        for source in sources:
            title = source.get("title")
            prefix = f"**{title}**: " if title else ""
            lines.append(f"- {prefix}{source['url']}")
        lines.append("")
    return "\n".join(lines)


FORMATTERS = {
    "search": format_search,
    "extract": format_extract,
    "crawl": format_crawl,
    "map": format_map,
    "research": format_research,
}
