"""Binary sentiment aggregation on a 0-10 scale."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from brandscope.agents.sentiment_analysis import SentimentAnalysisAgent, SentimentAnalysisInput
from brandscope.core.exceptions import MalformedModelOutputError
from brandscope.schemas.analysis import (
    NEUTRAL_SENTIMENT,
    SentimentBreakdown,
    SentimentDetail,
    SentimentResult,
)
from brandscope.schemas.common import clamp
from brandscope.schemas.search import RedditThread

logger = logging.getLogger(__name__)

NO_THREADS_CONTEXT = "No Reddit data available for analysis"


def calculate_sentiment_score(positive: int, negative: int) -> float:
    """``positive / (positive + negative) * 10``, or neutral with no mentions."""
    total = positive + negative
    if total <= 0:
        return NEUTRAL_SENTIMENT
    return clamp(positive / total * 10, 0.0, 10.0)


def _load_answer(text: str) -> dict[str, Any]:
    try:
        payload = json.loads(text.strip())
    except ValueError:
        match = re.search(r"\{[\s\S]*\}", text)
        if not match:
            raise MalformedModelOutputError("Sentiment answer contains no JSON object")
        try:
            payload = json.loads(match.group(0))
        except ValueError as e:
            raise MalformedModelOutputError(f"Sentiment answer is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedModelOutputError("Sentiment answer is not a JSON object")
    return payload


def parse_sentiment_answer(text: str) -> SentimentResult:
    """Turn the model answer into a SentimentResult.

    Only POSITIVE and NEGATIVE labels count, each weighted by its
    ``mentionCount`` (at least 1). The score is recomputed from those
    weights and any score in the answer is ignored.

    Raises:
        MalformedModelOutputError: If no JSON object can be recovered.
    """
    payload = _load_answer(text)
    raw_details = payload.get("sentimentDetails") or payload.get("sentiment_details") or []

    details: list[SentimentDetail] = []
    for item in raw_details if isinstance(raw_details, list) else []:
        if not isinstance(item, dict):
            continue
        label = str(item.get("sentiment") or "").strip().upper()
        if label not in ("POSITIVE", "NEGATIVE"):
            continue
        try:
            details.append(SentimentDetail.model_validate({**item, "sentiment": label}))
        except ValueError:
            logger.debug("Skipping malformed sentiment detail", extra={"detail": item})

    positive = sum(max(d.mention_count, 1) for d in details if d.sentiment == "POSITIVE")
    negative = sum(max(d.mention_count, 1) for d in details if d.sentiment == "NEGATIVE")
    return SentimentResult(
        sentiment_score=calculate_sentiment_score(positive, negative),
        sentiment_breakdown=SentimentBreakdown(positive=positive, negative=negative),
        total_mentions=positive + negative,
        sentiment_details=details,
        analysis_context=str(payload.get("analysisContext") or payload.get("analysis_context") or ""),
    )


async def analyze_sentiment(
    threads: list[RedditThread],
    brand_name: str,
    brand_context: str | None = None,
) -> SentimentResult:
    """Score sentiment toward a brand across Reddit threads. Never raises."""
    if not threads:
        return SentimentResult.neutral(analysis_context=NO_THREADS_CONTEXT)

    try:
        agent = SentimentAnalysisAgent()
        answer = await agent.run(
            SentimentAnalysisInput(
                brand_name=brand_name,
                brand_context=brand_context,
                threads=threads,
            )
        )
        result = parse_sentiment_answer(answer or "")
    except Exception as e:
        logger.warning("Sentiment analysis failed", extra={"brand": brand_name, "error": str(e)})
        return SentimentResult.neutral(error=str(e) or "Unknown error in sentiment analysis")

    logger.info(
        "Sentiment analysis completed",
        extra={
            "brand": brand_name,
            "score": result.sentiment_score,
            "mentions": result.total_mentions,
        },
    )
    return result
