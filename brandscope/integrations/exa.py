"""Exa web search integration.

Used for brand discovery and company sizing searches. Returns raw rows of
``{title, url, text}``; scoring and dedupe happen in the calling service.
"""

import logging
from typing import Any, Literal

import httpx

from brandscope.config import settings
from brandscope.core.concurrency import with_timeout
from brandscope.core.exceptions import APIKeyMissingError, ExternalAPIError, RateLimitExceededError

logger = logging.getLogger(__name__)

Livecrawl = Literal["always", "never", "fallback"]


class ExaClient:
    """Client for the Exa search API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.exa_api_key
        self.base_url = (base_url or settings.exa_base_url).rstrip("/")
        self.timeout = timeout or settings.external_call_timeout_seconds
        self._client: httpx.AsyncClient | None = None

        if not self.api_key:
            raise APIKeyMissingError("Exa")

    async def __aenter__(self) -> "ExaClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "x-api-key": str(self.api_key),
                "Content-Type": "application/json",
            },
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    async def search_and_contents(
        self,
        query: str,
        *,
        num_results: int = 6,
        include_domains: list[str] | None = None,
        livecrawl: Livecrawl = "never",
    ) -> list[dict[str, str]]:
        """Run one search and return result rows with page text.

        Args:
            query: Search query text
            num_results: Maximum rows to request
            include_domains: Restrict results to these domains
            livecrawl: Content freshness policy

        Returns:
            List of ``{title, url, text}`` dicts (possibly empty)
        """
        payload: dict[str, Any] = {
            "query": query,
            "numResults": num_results,
            "contents": {"text": True, "livecrawl": livecrawl},
        }
        if include_domains:
            payload["includeDomains"] = include_domains

        logger.info(
            "Exa search request",
            extra={"query": query, "num_results": num_results, "domains": include_domains or []},
        )
        data = await with_timeout(
            self._post("/search", payload),
            timeout=self.timeout,
            api_name="Exa",
        )

        rows: list[dict[str, str]] = []
        for item in data.get("results") or []:
            if not isinstance(item, dict):
                continue
            url = item.get("url")
            if not isinstance(url, str) or not url:
                continue
            rows.append(
                {
                    "title": str(item.get("title") or ""),
                    "url": url,
                    "text": str(item.get("text") or ""),
                }
            )
        return rows

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        try:
            response = await self.client.post(url, json=payload)

            if response.status_code == 429:
                logger.warning("Exa rate limit hit", extra={"endpoint": endpoint})
                raise RateLimitExceededError("Exa")

            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            logger.warning("Exa HTTP error", extra={"endpoint": endpoint, "error": str(e)})
            raise ExternalAPIError("Exa", str(e)) from e
        except ValueError as e:
            raise ExternalAPIError("Exa", f"Invalid JSON response: {e}") from e

        if not isinstance(result, dict):
            raise ExternalAPIError("Exa", "Unexpected response shape")
        return result
