"""
Logger Configuration Module

Handles logging setup for the Tavily tools. Standard output is reserved for
MCP JSON-RPC traffic and CLI results, so log records go to a file and stderr.
"""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _setup_telemetry() -> None:
    """Export Strands traces over OTLP when an endpoint is configured."""
    if "OTEL_EXPORTER_OTLP_ENDPOINT" not in os.environ:
        return

    from strands.telemetry import StrandsTelemetry

    StrandsTelemetry().setup_otlp_exporter()


def create_logger(log_dir: str = "logs", level: int = logging.INFO) -> logging.Logger:
    # Create logs directory if it doesn't exist
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    tavily_logger = logging.getLogger("tavily_toolkit")
    tavily_logger.setLevel(logging.DEBUG)

    # Full detail goes to the log file
    file_handler = logging.FileHandler(Path(log_dir) / "tavily.log", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    tavily_logger.addHandler(file_handler)

    # Diagnostics on stderr
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    tavily_logger.addHandler(stderr_handler)

    _setup_telemetry()

    return tavily_logger


tavily_logger: logging.Logger | None = None


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    global tavily_logger
    if tavily_logger is None:
        tavily_logger = create_logger(level=level)
    return tavily_logger
