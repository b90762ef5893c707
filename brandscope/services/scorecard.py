"""Scorecard assembly: a pure merge of stage outputs with fallbacks."""

from __future__ import annotations

import uuid
from urllib.parse import urlparse

from brandscope.config import settings
from brandscope.schemas.analysis import (
    NEUTRAL_SENTIMENT,
    CompetitorAnalysis,
    CompetitorSet,
    SentimentResult,
)
from brandscope.schemas.brand import UNKNOWN_COMPANY_SIZE, SizingOutcome
from brandscope.schemas.relevance import EvaluatedSearchResult
from brandscope.schemas.scorecard import (
    GenerationStep,
    Scorecard,
    ScorecardCompetitorProfile,
    ScorecardMentions,
    ScorecardSentiment,
    ScorecardThread,
    ThreadSentiment,
)
from brandscope.schemas.search import RedditThread
from brandscope.services.reddit_search import count_brand_mentions, extract_subreddits

EXCERPT_CHARS = 200


def new_scorecard_id() -> str:
    return str(uuid.uuid4())


def site_origin(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


def resolve_brand_website(
    evaluated: list[EvaluatedSearchResult],
    brand_url: str | None = None,
) -> str:
    """Official site origin, else the caller-supplied URL, else empty."""
    for result in evaluated:
        if result.is_official_site:
            origin = site_origin(result.url)
            if origin:
                return origin
    return brand_url or ""


def resolve_company_size(sizing: SizingOutcome | None) -> str:
    if sizing is None or not sizing.success or sizing.sizing_data is None:
        return UNKNOWN_COMPANY_SIZE
    return sizing.sizing_data.company_size


def _excerpt(content: str) -> str:
    if len(content) <= EXCERPT_CHARS:
        return content
    return content[:EXCERPT_CHARS] + "..."


def build_scorecard_threads(
    threads: list[RedditThread],
    sentiment: SentimentResult | None,
    limit: int | None = None,
) -> list[ScorecardThread]:
    limit = settings.scorecard_max_threads if limit is None else limit
    labels: dict[str, ThreadSentiment] = {}
    if sentiment is not None:
        for detail in sentiment.sentiment_details:
            if detail.url:
                labels.setdefault(detail.url, "positive" if detail.sentiment == "POSITIVE" else "negative")

    return [
        ScorecardThread(
            title=thread.title,
            url=thread.url,
            subreddit=thread.subreddit,
            score=thread.score,
            comments=thread.comments,
            sentiment=labels.get(thread.url, "neutral"),
            excerpt=_excerpt(thread.content),
        )
        for thread in threads[:limit]
    ]


def assemble_scorecard(
    *,
    brand_name: str,
    evaluated_results: list[EvaluatedSearchResult] | None = None,
    brand_url: str | None = None,
    sizing: SizingOutcome | None = None,
    competitor_set: CompetitorSet | None = None,
    brand_sentiment: SentimentResult | None = None,
    competitor_analyses: list[CompetitorAnalysis] | None = None,
    threads: list[RedditThread] | None = None,
    fallback_subreddits: list[str] | None = None,
    progress: list[GenerationStep] | None = None,
    scorecard_id: str | None = None,
) -> Scorecard:
    """Merge every stage output into a completed Scorecard.

    Missing or failed inputs fall back to empty lists, ``"Unknown"`` size and
    neutral sentiment. Makes no network calls.
    """
    threads = threads or []
    competitor_set = competitor_set or CompetitorSet()
    analyses = {analysis.name: analysis for analysis in competitor_analyses or []}

    competitor_mentions: dict[str, int] = {}
    competitor_sentiment: dict[str, float] = {}
    competitor_profiles: dict[str, ScorecardCompetitorProfile] = {}
    for name in competitor_set.competitors:
        analysis = analyses.get(name)
        if analysis is not None and analysis.mentions is not None:
            competitor_mentions[name] = analysis.mentions
        else:
            competitor_mentions[name] = competitor_set.competitor_mentions.get(name, 0)
        competitor_sentiment[name] = (
            analysis.sentiment.sentiment_score if analysis is not None else NEUTRAL_SENTIMENT
        )
        competitor_profiles[name] = (
            ScorecardCompetitorProfile(website=analysis.website, company_size=analysis.company_size)
            if analysis is not None
            else ScorecardCompetitorProfile()
        )

    subreddits = extract_subreddits(threads) or list(fallback_subreddits or [])

    return Scorecard(
        id=scorecard_id or new_scorecard_id(),
        brand_name=brand_name,
        brand_website=resolve_brand_website(evaluated_results or [], brand_url),
        company_size=resolve_company_size(sizing),
        competitors=list(competitor_set.competitors),
        competitor_profiles=competitor_profiles,
        subreddits=subreddits[: settings.reddit_max_subreddits],
        mentions=ScorecardMentions(
            brand=sum(count_brand_mentions(thread.content, brand_name) for thread in threads),
            competitors=competitor_mentions,
        ),
        threads=build_scorecard_threads(threads, brand_sentiment),
        sentiment=ScorecardSentiment(
            brand=brand_sentiment.sentiment_score if brand_sentiment else NEUTRAL_SENTIMENT,
            competitors=competitor_sentiment,
        ),
        status="completed",
        generation_progress=list(progress or []),
    )
