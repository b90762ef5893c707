"""Reddit discovery: query plan, heuristic relevance and mention extraction."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from brandscope.config import settings
from brandscope.integrations.reddit import RedditClient
from brandscope.schemas.search import (
    RedditMention,
    RedditSearchResponse,
    RedditThread,
    SearchDepth,
)
from brandscope.services.summarization import summarize_or_truncate

logger = logging.getLogger(__name__)

NO_REDDIT_RESULTS_ERROR = "No Reddit results found"
MENTION_CONTEXT_CHARS = 100

_DISCUSSION_MARKERS = ("review", "experience", "opinion")
_COMPARISON_MARKERS = ("vs", "compare", "alternative")


@dataclass(frozen=True)
class RedditQuery:
    """A search term, optionally restricted to one subreddit."""

    query: str
    subreddit: str | None = None

    def __str__(self) -> str:
        if self.subreddit:
            return f"r/{self.subreddit}: {self.query}"
        return self.query


def normalize_subreddit(name: str | None) -> str:
    """Render a subreddit as ``r/<name>``; empty input becomes ``unknown``."""
    cleaned = (name or "").strip().removeprefix("/").removeprefix("r/").strip("/")
    if not cleaned:
        return "unknown"
    return f"r/{cleaned}"


def construct_reddit_queries(
    brand_name: str,
    brand_context: str | None = None,
    subreddits: Iterable[str] | None = None,
) -> list[RedditQuery]:
    """Build the ordered Reddit query plan for one brand."""
    base = " ".join(f"{brand_name} {brand_context or ''}".split())
    queries = [
        RedditQuery(base),
        RedditQuery(f"{base} review"),
        RedditQuery(f"{base} experience"),
        RedditQuery(f"{base} vs"),
    ]
    for subreddit in list(subreddits or [])[:3]:
        name = normalize_subreddit(subreddit).removeprefix("r/")
        if name != "unknown":
            queries.append(RedditQuery(brand_name, subreddit=name))
    queries.append(RedditQuery(f"{brand_name} best OR worst OR opinion"))
    queries.append(RedditQuery(f"{brand_name} alternative OR competitor"))
    return queries


def count_brand_mentions(text: str, brand_name: str) -> int:
    if not brand_name:
        return 0
    return len(re.findall(re.escape(brand_name), text, flags=re.IGNORECASE))


def calculate_reddit_relevance(post: Mapping[str, Any], brand_name: str) -> int:
    """Heuristic 0-100 relevance of a raw Reddit post to a brand."""
    title = str(post.get("title") or "").lower()
    content = str(post.get("text") or "").lower()
    brand = brand_name.lower()

    score = float(min(count_brand_mentions(content, brand_name) * 10, 50))
    if brand and brand in title:
        score += 30
    if any(marker in content for marker in _DISCUSSION_MARKERS):
        score += 15
    if any(marker in content for marker in _COMPARISON_MARKERS):
        score += 20
    post_score = post.get("score") or 0
    if post_score:
        score += min(post_score / 10, 15)
    num_comments = post.get("num_comments") or 0
    if num_comments:
        score += min(num_comments / 5, 10)

    return int(round(max(0.0, min(100.0, score))))


def extract_subreddits(threads: Iterable[RedditThread], limit: int | None = None) -> list[str]:
    """Distinct known subreddits in first-seen order."""
    limit = settings.reddit_max_subreddits if limit is None else limit
    seen: dict[str, None] = {}
    for thread in threads:
        if thread.subreddit and thread.subreddit != "unknown":
            seen.setdefault(thread.subreddit, None)
    return list(seen)[:limit]


def extract_mention_context(content: str, brand_name: str) -> str:
    """Text around the first brand mention, up to 100 chars each side."""
    index = content.lower().find(brand_name.lower())
    if index == -1 or not brand_name:
        return ""
    start = max(0, index - MENTION_CONTEXT_CHARS)
    end = min(len(content), index + len(brand_name) + MENTION_CONTEXT_CHARS)
    return content[start:end]


def extract_mentions(threads: Iterable[RedditThread], brand_name: str) -> list[RedditMention]:
    mentions: list[RedditMention] = []
    for thread in threads:
        count = count_brand_mentions(thread.content, brand_name)
        if count == 0:
            continue
        mentions.append(
            RedditMention(
                url=thread.url,
                title=thread.title,
                subreddit=thread.subreddit,
                mention_count=count,
                context=extract_mention_context(thread.content, brand_name),
            )
        )
    return mentions


async def _to_thread(post: Mapping[str, Any], brand_name: str, brand_context: str | None) -> RedditThread:
    text = str(post.get("text") or "")
    content = text or "No content available"
    subreddit = normalize_subreddit(post.get("subreddit"))
    if len(text) > settings.summary_min_chars:
        context_note = f" ({brand_context})" if brand_context else ""
        content = await summarize_or_truncate(
            subject=f"{brand_name}{context_note}",
            title=f"{post.get('title') or ''} [{subreddit}]",
            url=str(post.get("url") or ""),
            content=text,
            focus="opinions, experiences, and any mentions of competitors or alternatives",
        )
    return RedditThread(
        title=str(post.get("title") or ""),
        url=str(post["url"]),
        subreddit=subreddit,
        score=int(post.get("score") or 0),
        comments=int(post.get("num_comments") or 0),
        content=content,
        relevance_score=calculate_reddit_relevance(post, brand_name),
        author=str(post.get("author") or "unknown"),
        created_utc=float(post.get("created_utc") or 0),
    )


async def search_reddit(
    brand_name: str,
    brand_context: str | None = None,
    subreddits: list[str] | None = None,
    max_results: int | None = None,
    search_depth: SearchDepth = "shallow",
) -> RedditSearchResponse:
    """Find Reddit discussions of a brand. Never raises."""
    max_results = settings.reddit_max_results if max_results is None else max_results
    target = max_results * 2 if search_depth == "deep" else max_results
    queries = construct_reddit_queries(brand_name, brand_context, subreddits)
    query_labels = [str(query) for query in queries]
    logger.info("Reddit search started", extra={"brand": brand_name, "queries": query_labels})

    posts: list[dict[str, Any]] = []
    try:
        async with RedditClient() as reddit:
            for query in queries:
                try:
                    found = await reddit.search(
                        query.query,
                        subreddit=query.subreddit,
                        limit=min(10, target),
                    )
                except Exception as e:
                    logger.warning(
                        "Reddit query failed",
                        extra={"brand": brand_name, "query": str(query), "error": str(e)},
                    )
                    continue
                posts.extend(found)
                if len(posts) >= target:
                    break
    except Exception as e:
        logger.warning("Reddit search failed", extra={"brand": brand_name, "error": str(e)})
        return RedditSearchResponse(search_queries=query_labels, error=str(e))

    if not posts:
        return RedditSearchResponse(search_queries=query_labels, error=NO_REDDIT_RESULTS_ERROR)

    seen_urls: set[str] = set()
    threads: list[RedditThread] = []
    for post in posts:
        if post["url"] in seen_urls:
            continue
        seen_urls.add(post["url"])
        try:
            threads.append(await _to_thread(post, brand_name, brand_context))
        except Exception as e:
            logger.warning(
                "Skipping malformed Reddit post",
                extra={"brand": brand_name, "url": post.get("url"), "error": str(e)},
            )

    threads.sort(key=lambda thread: thread.relevance_score, reverse=True)
    logger.info(
        "Reddit search completed",
        extra={"brand": brand_name, "raw_posts": len(posts), "threads": len(threads)},
    )
    return RedditSearchResponse(
        results=threads[:max_results],
        subreddits=extract_subreddits(threads),
        mentions=extract_mentions(threads, brand_name),
        search_queries=query_labels,
    )
