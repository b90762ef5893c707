"""Unit tests for Reddit discovery and the public JSON client."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from brandscope.core.exceptions import ExternalAPIError, RateLimitExceededError
from brandscope.integrations.reddit import RedditClient
from brandscope.schemas.search import RedditThread
from brandscope.services import reddit_search
from brandscope.services.reddit_search import RedditQuery


class _FakeReddit:
    def __init__(self, responses: list[Any]) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, str | None, int]] = []

    async def __aenter__(self) -> "_FakeReddit":
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None

    async def search(self, query: str, *, subreddit: str | None = None, limit: int = 10) -> list[dict[str, Any]]:
        self.calls.append((query, subreddit, limit))
        response = self._responses.pop(0) if self._responses else []
        if isinstance(response, Exception):
            raise response
        return response


def _post(url: str, title: str = "Post", text: str = "", **extra: Any) -> dict[str, Any]:
    return {"url": url, "title": title, "text": text, "subreddit": "tools", **extra}


def test_normalize_subreddit_variants() -> None:
    assert reddit_search.normalize_subreddit("tools") == "r/tools"
    assert reddit_search.normalize_subreddit("r/tools") == "r/tools"
    assert reddit_search.normalize_subreddit("/r/tools/") == "r/tools"
    assert reddit_search.normalize_subreddit("") == "unknown"
    assert reddit_search.normalize_subreddit(None) == "unknown"


def test_construct_reddit_queries_orders_plan_and_caps_subreddits() -> None:
    queries = reddit_search.construct_reddit_queries(
        "Acme", "anvils", ["r/tools", "hardware", "", "diy", "extra"]
    )

    assert [str(q) for q in queries] == [
        "Acme anvils",
        "Acme anvils review",
        "Acme anvils experience",
        "Acme anvils vs",
        "r/tools: Acme",
        "r/hardware: Acme",
        "Acme best OR worst OR opinion",
        "Acme alternative OR competitor",
    ]
    assert queries[4] == RedditQuery("Acme", subreddit="tools")


def test_calculate_reddit_relevance_combines_signals() -> None:
    post = {
        "title": "Acme review",
        "text": "Acme is great. I compared acme vs Globex, my experience was good.",
    }

    # 2 mentions (20) + title (30) + discussion (15) + comparison (20)
    assert reddit_search.calculate_reddit_relevance(post, "Acme") == 85


def test_calculate_reddit_relevance_caps_engagement_and_total() -> None:
    post = {
        "title": "Acme",
        "text": " ".join(["acme"] * 10) + " review vs",
        "score": 10_000,
        "num_comments": 10_000,
    }

    assert reddit_search.calculate_reddit_relevance(post, "Acme") == 100
    assert reddit_search.calculate_reddit_relevance({"title": "", "text": ""}, "Acme") == 0


def test_count_brand_mentions_escapes_special_characters() -> None:
    assert reddit_search.count_brand_mentions("I like C++ and c++ a lot", "C++") == 2
    assert reddit_search.count_brand_mentions("anything", "") == 0


def test_extract_mention_context_windows_first_mention() -> None:
    content = "x" * 150 + "Acme" + "y" * 150

    context = reddit_search.extract_mention_context(content, "acme")

    assert context == "x" * 100 + "Acme" + "y" * 100
    assert reddit_search.extract_mention_context("nothing here", "Acme") == ""


def test_extract_subreddits_skips_unknown_and_dedupes() -> None:
    threads = [
        RedditThread(url="u1", subreddit="r/a"),
        RedditThread(url="u2", subreddit="unknown"),
        RedditThread(url="u3", subreddit="r/b"),
        RedditThread(url="u4", subreddit="r/a"),
    ]

    assert reddit_search.extract_subreddits(threads) == ["r/a", "r/b"]
    assert reddit_search.extract_subreddits(threads, limit=1) == ["r/a"]


@pytest.mark.asyncio
async def test_search_reddit_dedupes_sorts_and_stops_early(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeReddit(
        [
            [_post("https://reddit.com/1", text="nothing"), _post("https://reddit.com/2", title="Acme vs Globex", text="Acme review")],
            [_post("https://reddit.com/2", title="dup"), _post("https://reddit.com/3", text="acme")],
            [_post("https://reddit.com/never")],
        ]
    )
    monkeypatch.setattr(reddit_search, "RedditClient", lambda: fake)

    response = await reddit_search.search_reddit("Acme", max_results=3)

    assert len(fake.calls) == 2
    assert fake.calls[0] == ("Acme", None, 3)
    assert [t.url for t in response.results] == [
        "https://reddit.com/2",
        "https://reddit.com/3",
        "https://reddit.com/1",
    ]
    assert response.results[0].title == "Acme vs Globex"
    assert response.results[0].subreddit == "r/tools"
    assert response.subreddits == ["r/tools"]
    assert [m.url for m in response.mentions] == ["https://reddit.com/2", "https://reddit.com/3"]
    assert response.error is None


@pytest.mark.asyncio
async def test_search_reddit_deep_doubles_target(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeReddit([[_post(f"https://reddit.com/{i}") for i in range(4)]] * 8)
    monkeypatch.setattr(reddit_search, "RedditClient", lambda: fake)

    response = await reddit_search.search_reddit("Acme", max_results=4, search_depth="deep")

    assert fake.calls[0][2] == 8
    assert len(fake.calls) == 2
    assert len(response.results) == 4


@pytest.mark.asyncio
async def test_search_reddit_skips_failing_queries_and_reports_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeReddit([ExternalAPIError("Reddit", "down")])
    monkeypatch.setattr(reddit_search, "RedditClient", lambda: fake)

    response = await reddit_search.search_reddit("Zzyzx123")

    assert len(fake.calls) == 6
    assert response.results == []
    assert response.error == "No Reddit results found"
    assert response.search_queries[0] == "Zzyzx123"


@pytest.mark.asyncio
async def test_search_reddit_summarizes_long_posts(monkeypatch: pytest.MonkeyPatch) -> None:
    long_text = "Acme " * 400
    fake = _FakeReddit([[_post("https://reddit.com/long", text=long_text)]])
    monkeypatch.setattr(reddit_search, "RedditClient", lambda: fake)

    async def _fake_summary(**kwargs: Any) -> str:
        return "condensed"

    monkeypatch.setattr(reddit_search, "summarize_or_truncate", _fake_summary)

    response = await reddit_search.search_reddit("Acme", max_results=1)

    assert response.results[0].content == "condensed"
    # Heuristic runs on the full post text
    assert response.results[0].relevance_score == 50


def _listing(*children: dict[str, Any]) -> dict[str, Any]:
    return {"data": {"children": [{"data": child} for child in children]}}


@pytest.mark.asyncio
async def test_reddit_client_normalizes_listing() -> None:
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(
            200,
            json=_listing(
                {
                    "title": "Acme thoughts",
                    "permalink": "/r/tools/comments/abc/acme/",
                    "selftext": "Love it",
                    "subreddit": "tools",
                    "score": 12,
                    "num_comments": 3,
                    "author": "someone",
                },
                {"title": "", "permalink": "/r/tools/comments/def/"},
            ),
        )

    async with RedditClient(base_url="https://reddit.test") as reddit:
        await reddit.client.aclose()
        reddit._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        posts = await reddit.search("Acme", subreddit="r/tools", limit=5)

    assert seen[0].path == "/r/tools/search.json"
    assert seen[0].params["restrict_sr"] == "1"
    assert posts == [
        {
            "title": "Acme thoughts",
            "url": "https://reddit.test/r/tools/comments/abc/acme/",
            "text": "Acme thoughts\n\nLove it",
            "subreddit": "tools",
            "score": 12,
            "num_comments": 3,
            "created_utc": 0.0,
            "author": "someone",
        }
    ]


@pytest.mark.asyncio
async def test_reddit_client_maps_rate_limit_and_http_errors() -> None:
    statuses = iter([429, 503])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses))

    async with RedditClient(base_url="https://reddit.test") as reddit:
        await reddit.client.aclose()
        reddit._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        with pytest.raises(RateLimitExceededError):
            await reddit.search("Acme")
        with pytest.raises(ExternalAPIError):
            await reddit.search("Acme")
