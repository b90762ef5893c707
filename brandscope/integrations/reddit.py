"""Reddit public JSON search (unauthenticated)."""

import logging
from typing import Any

import httpx

from brandscope.config import settings
from brandscope.core.concurrency import with_timeout
from brandscope.core.exceptions import ExternalAPIError, RateLimitExceededError

logger = logging.getLogger(__name__)


class RedditClient:
    """Fetch Reddit search listings through the ``search.json`` endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.reddit_base_url).rstrip("/")
        self.user_agent = user_agent or settings.reddit_user_agent
        self.timeout = timeout or settings.external_call_timeout_seconds
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "RedditClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
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

    async def search(
        self,
        query: str,
        *,
        subreddit: str | None = None,
        limit: int = 10,
    ) -> list[dict[str, Any]]:
        """Search posts site-wide, or inside one subreddit.

        Returns:
            List of raw post dicts with title, url, text, subreddit, score,
            num_comments, created_utc and author
        """
        if subreddit:
            path = f"/r/{subreddit.removeprefix('r/')}/search.json"
            params: dict[str, Any] = {"q": query, "restrict_sr": 1}
        else:
            path = "/search.json"
            params = {"q": query}
        params.update({"sort": "relevance", "t": "all", "limit": limit})

        logger.info("Reddit search request", extra={"query": query, "subreddit": subreddit})
        data = await with_timeout(
            self._get(path, params),
            timeout=self.timeout,
            api_name="Reddit",
        )

        posts: list[dict[str, Any]] = []
        children = (data.get("data") or {}).get("children") or []
        for child in children[:limit]:
            post = child.get("data") if isinstance(child, dict) else None
            if not isinstance(post, dict):
                continue
            permalink = post.get("permalink") or ""
            title = str(post.get("title") or "")
            if not permalink or not title:
                continue
            selftext = str(post.get("selftext") or "")
            posts.append(
                {
                    "title": title,
                    "url": f"{self.base_url}{permalink}",
                    "text": f"{title}\n\n{selftext}".strip(),
                    "subreddit": str(post.get("subreddit") or ""),
                    "score": int(post.get("score") or 0),
                    "num_comments": int(post.get("num_comments") or 0),
                    "created_utc": float(post.get("created_utc") or 0),
                    "author": str(post.get("author") or "unknown"),
                }
            )
        return posts

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.client.get(f"{self.base_url}{path}", params=params)

            if response.status_code == 429:
                logger.warning("Reddit rate limit hit", extra={"path": path})
                raise RateLimitExceededError("Reddit")

            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            logger.warning("Reddit HTTP error", extra={"path": path, "error": str(e)})
            raise ExternalAPIError("Reddit", str(e)) from e
        except ValueError as e:
            raise ExternalAPIError("Reddit", f"Invalid JSON response: {e}") from e

        if not isinstance(result, dict):
            raise ExternalAPIError("Reddit", "Unexpected response shape")
        return result
