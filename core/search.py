"""
Web search clients used by the research agent.

Both clients return an ordered list of SearchResult and raise
ProviderUnavailable on any failure; recovering from that is the caller's job.
"""

import asyncio
import logging
from typing import Any, List, Optional

import httpx

from .errors import ConfigurationError, ProviderUnavailable
from .types import SearchResult


logger = logging.getLogger(__name__)

SERPER_URL = "https://google.serper.dev/search"


def format_results(results: List[SearchResult]) -> str:
    """Flatten search hits into one text blob, one `title: snippet` per line."""
    return "\n".join(f"{r.title}: {r.snippet}" for r in results)


class SerperSearchClient:
    """Google results via the Serper API."""

    provider_name = "serper"

    def __init__(
        self,
        api_key: str,
        max_results: int = 5,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ConfigurationError("SERPER_API_KEY is required")
        self.api_key = api_key
        self.max_results = max_results
        self.timeout = timeout
        self.http_client = http_client

    async def search(self, query: str) -> List[SearchResult]:
        payload = {"q": query, "num": self.max_results}
        headers = {"X-API-KEY": self.api_key, "Content-Type": "application/json"}

        try:
            if self.http_client is not None:
                response = await self.http_client.post(SERPER_URL, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(SERPER_URL, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderUnavailable(self.provider_name, str(e)) from e

        return [
            SearchResult(title=item.get("title") or "", snippet=item.get("snippet") or "")
            for item in (data.get("organic") or [])[:self.max_results]
        ]


class TavilySearchClient:
    """Web results via Tavily."""

    provider_name = "tavily"

    def __init__(self, api_key: str, max_results: int = 5, client: Optional[Any] = None):
        if client is None:
            if not api_key:
                raise ConfigurationError("TAVILY_API_KEY is required")
            from tavily import TavilyClient
            client = TavilyClient(api_key=api_key)
        self.client = client
        self.max_results = max_results

    async def search(self, query: str) -> List[SearchResult]:
        try:
            # The Tavily SDK is synchronous; keep it off the event loop
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(
                None,
                lambda: self.client.search(query=query, max_results=self.max_results),
            )
        except Exception as e:
            raise ProviderUnavailable(self.provider_name, str(e)) from e

        return [
            SearchResult(title=item.get("title") or "", snippet=item.get("content") or "")
            for item in (response.get("results") or [])[:self.max_results]
        ]


def create_search_client(config: Any) -> Optional[Any]:
    """Build the configured search client, or None when no key is set."""
    key = config.get_search_key()
    if not key:
        logger.info("No %s key configured; research agent will run without web search",
                    config.search_provider)
        return None

    if config.search_provider == "tavily":
        return TavilySearchClient(api_key=key, max_results=config.search_max_results)
    if config.search_provider == "serper":
        return SerperSearchClient(api_key=key, max_results=config.search_max_results)
    raise ConfigurationError(f"Unknown search provider: {config.search_provider}")
