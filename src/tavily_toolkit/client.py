"""
Tavily Provider Client

Performs exactly one HTTP call per request and classifies the outcome as a
success, an API error (non-2xx status) or a transport error (network failure
or timeout). Nothing is retried and nothing is raised for provider failures.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import quote

import httpx

from .settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS

Operation = Literal["search", "extract", "crawl", "map", "research"]
OPERATIONS: tuple[str, ...] = ("search", "extract", "crawl", "map", "research")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    body: dict[str, Any]


@dataclass(frozen=True)
class ApiError:
    status: int
    message: str


@dataclass(frozen=True)
class TransportError:
    message: str


ProviderResult = Success | ApiError | TransportError


class TavilyClient:
    """Thin async client for the Tavily REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        legacy_body_auth: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            api_key: Tavily API key forwarded as a bearer token
            base_url: API root, without trailing slash
            timeout: Per-call timeout in seconds
            legacy_body_auth: Send the key inside the search body instead of a header
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.legacy_body_auth = legacy_body_auth
        self._transport = transport

    def _headers(self, *, bearer: bool = True) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if bearer:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def execute(self, operation: Operation, body: dict[str, Any]) -> ProviderResult:
        """POST ``body`` to the endpoint for ``operation``."""
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown Tavily operation: {operation}")

        bearer = True
        if operation == "search" and self.legacy_body_auth:
            body = {**body, "api_key": self.api_key}
            bearer = False

        return await self._send(
            "POST", f"{self.base_url}/{operation}", headers=self._headers(bearer=bearer), json=body
        )

    async def fetch_research(self, request_id: str) -> ProviderResult:
        """GET the current status of a research job."""
        headers = {"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"}
        return await self._send(
            "GET", f"{self.base_url}/research/{quote(request_id, safe='')}", headers=headers
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> ProviderResult:
        # httpx timeouts apply per phase; the deadline covers the whole call.
        try:
            async with asyncio.timeout(self.timeout):
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    response = await client.request(method, url, **kwargs)
        except (TimeoutError, httpx.TimeoutException):
            logger.warning("Tavily %s %s timed out after %ss", method, url, self.timeout)
            return TransportError(f"request timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            logger.warning("Tavily %s %s failed: %s", method, url, e)
            return TransportError(str(e) or type(e).__name__)

        if not response.is_success:
            detail = response.text.strip()
            message = detail or response.reason_phrase
            logger.warning("Tavily API error %s: %s", response.status_code, message)
            return ApiError(status=response.status_code, message=message)

        try:
            data = response.json()
        except ValueError as e:
            return TransportError(f"invalid JSON response: {e}")

        if not isinstance(data, dict):
            return TransportError("unexpected response shape: expected a JSON object")
        return Success(data)
