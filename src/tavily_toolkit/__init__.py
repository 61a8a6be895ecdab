"""
Tavily Toolkit Package

Exposes the Tavily search, extract, crawl, map and research API as agent tools
(MCP and Strands) and command line scripts, with a bounded response cache and
a polling workflow for long-running research jobs.
"""

from tavily_toolkit.cache import ResponseCache
from tavily_toolkit.logger import setup_logging
from tavily_toolkit.service import TavilyService, build_service
from tavily_toolkit.settings import Settings, get_settings

__version__ = "1.0.0"
__all__ = [
    "ResponseCache",
    "Settings",
    "TavilyService",
    "build_service",
    "get_settings",
    "setup_logging",
]
