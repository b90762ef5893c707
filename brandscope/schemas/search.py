"""Web and Reddit search result schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from brandscope.schemas.common import CamelModel

SearchType = Literal["official", "about", "general"]
SearchDepth = Literal["shallow", "deep"]


class SearchResult(CamelModel):
    """A single web search hit with its heuristic pre-score."""

    title: str = ""
    url: str
    content: str = ""
    preliminary_score: int = Field(default=0, ge=0, le=100)


class BrandSearchResponse(CamelModel):
    """Output of the brand web search stage."""

    results: list[SearchResult] = Field(default_factory=list)
    search_queries: list[str] = Field(default_factory=list)
    error: str | None = None


class RedditThread(CamelModel):
    """A Reddit post normalized for downstream analysis."""

    title: str = ""
    url: str
    subreddit: str = "unknown"
    score: int = 0
    comments: int = 0
    content: str = ""
    relevance_score: int = Field(default=0, ge=0, le=100)
    author: str = "unknown"
    created_utc: float = 0


class RedditMention(CamelModel):
    """Brand mention count and surrounding text for one thread."""

    url: str
    title: str
    subreddit: str
    mention_count: int
    context: str = ""


class RedditSearchResponse(CamelModel):
    """Output of the Reddit discovery stage."""

    results: list[RedditThread] = Field(default_factory=list)
    subreddits: list[str] = Field(default_factory=list)
    mentions: list[RedditMention] = Field(default_factory=list)
    search_queries: list[str] = Field(default_factory=list)
    error: str | None = None
