"""Relevance gating for web results and Reddit threads."""

from __future__ import annotations

import logging

from brandscope.agents.brand_relevance import BrandRelevanceAgent, BrandRelevanceInput
from brandscope.agents.reddit_relevance import RedditRelevanceAgent, RedditRelevanceInput
from brandscope.config import settings
from brandscope.schemas.common import AdditionalIdentifiers
from brandscope.schemas.relevance import (
    BrandRelevanceEvaluation,
    EvaluatedSearchResult,
    EvaluatedThread,
    RedditRelevanceEvaluation,
)
from brandscope.schemas.search import RedditThread, SearchResult
from brandscope.services.research_context import ResearchContext

logger = logging.getLogger(__name__)


async def evaluate_search_result(
    ctx: ResearchContext,
    result: SearchResult,
    brand_name: str,
    brand_context: str | None = None,
    additional_identifiers: AdditionalIdentifiers | None = None,
) -> BrandRelevanceEvaluation:
    """Judge one web result for ``brand_name``.

    A URL already evaluated for this brand in the same run is not sent to
    the model again. Never raises.
    """
    try:
        if not await ctx.claim_url(brand_name, result.url):
            return BrandRelevanceEvaluation.already_processed()

        agent = BrandRelevanceAgent()
        return await agent.run(
            BrandRelevanceInput(
                brand_name=brand_name,
                brand_context=brand_context,
                additional_identifiers=additional_identifiers,
                result=result,
            )
        )
    except Exception as e:
        logger.warning(
            "Brand relevance evaluation failed",
            extra={"brand": brand_name, "url": result.url, "error": str(e)},
        )
        return BrandRelevanceEvaluation.failed()


async def evaluate_reddit_thread(
    ctx: ResearchContext,
    thread: RedditThread,
    brand_name: str,
    brand_context: str | None = None,
    brand_categories: list[str] | None = None,
    threshold: int | None = None,
) -> RedditRelevanceEvaluation:
    """Judge one Reddit thread for ``brand_name`` and apply the threshold gate."""
    threshold = settings.reddit_relevance_threshold if threshold is None else threshold
    try:
        if not await ctx.claim_url(brand_name, thread.url):
            return RedditRelevanceEvaluation.already_processed(threshold)

        agent = RedditRelevanceAgent()
        verdict = await agent.run(
            RedditRelevanceInput(
                brand_name=brand_name,
                brand_context=brand_context,
                brand_categories=brand_categories or [],
                thread=thread,
            )
        )
        return RedditRelevanceEvaluation.from_verdict(verdict, threshold)
    except Exception as e:
        logger.warning(
            "Reddit relevance evaluation failed",
            extra={"brand": brand_name, "url": thread.url, "error": str(e)},
        )
        return RedditRelevanceEvaluation.failed(threshold)


def rank_evaluated_results(
    evaluated: list[EvaluatedSearchResult],
    *,
    relevance_threshold: int | None = None,
    fallback_threshold: int | None = None,
) -> list[EvaluatedSearchResult]:
    """Drop weak results; put confident official sites first, then by confidence."""
    strong = (
        settings.brand_relevance_threshold if relevance_threshold is None else relevance_threshold
    )
    floor = settings.brand_fallback_threshold if fallback_threshold is None else fallback_threshold

    kept = [result for result in evaluated if result.confidence_score >= floor]

    def _rank(result: EvaluatedSearchResult) -> tuple[int, int]:
        preferred = result.is_official_site and result.confidence_score >= strong
        return (0 if preferred else 1, -result.confidence_score)

    return sorted(kept, key=_rank)


async def filter_search_results(
    ctx: ResearchContext,
    results: list[SearchResult],
    brand_name: str,
    brand_context: str | None = None,
    additional_identifiers: AdditionalIdentifiers | None = None,
) -> list[EvaluatedSearchResult]:
    """Evaluate every web result and keep the relevant ones, best first."""
    evaluated: list[EvaluatedSearchResult] = []
    for result in results:
        evaluation = await evaluate_search_result(
            ctx, result, brand_name, brand_context, additional_identifiers
        )
        evaluated.append(EvaluatedSearchResult(**result.model_dump(), evaluation=evaluation))

    ranked = rank_evaluated_results(evaluated)
    logger.info(
        "Brand relevance filter completed",
        extra={"brand": brand_name, "evaluated": len(evaluated), "kept": len(ranked)},
    )
    return ranked


async def filter_reddit_threads(
    ctx: ResearchContext,
    threads: list[RedditThread],
    brand_name: str,
    brand_context: str | None = None,
    brand_categories: list[str] | None = None,
    threshold: int | None = None,
) -> list[EvaluatedThread]:
    """Evaluate every thread and keep those that meet the threshold."""
    kept: list[EvaluatedThread] = []
    for thread in threads:
        evaluation = await evaluate_reddit_thread(
            ctx, thread, brand_name, brand_context, brand_categories, threshold
        )
        if evaluation.meets_threshold:
            kept.append(EvaluatedThread(**thread.model_dump(), evaluation=evaluation))

    logger.info(
        "Reddit relevance filter completed",
        extra={"brand": brand_name, "evaluated": len(threads), "kept": len(kept)},
    )
    return kept
