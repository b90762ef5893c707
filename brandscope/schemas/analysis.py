"""Competitor discovery and sentiment analysis schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from brandscope.schemas.brand import UNKNOWN_COMPANY_SIZE
from brandscope.schemas.common import CamelModel, clamp

NEUTRAL_SENTIMENT = 5.0

SentimentLabel = Literal["POSITIVE", "NEGATIVE"]


class CompetitorSet(CamelModel):
    """Competitor names found in Reddit discussions of a brand."""

    competitors: list[str] = Field(default_factory=list)
    competitor_mentions: dict[str, int] = Field(default_factory=dict)
    competitor_contexts: dict[str, list[str]] = Field(default_factory=dict)
    analysis_context: str = ""
    strategy: str | None = None
    error: str | None = None


class SentimentBreakdown(CamelModel):
    positive: int = 0
    negative: int = 0
    neutral: int = 0


class SentimentDetail(CamelModel):
    url: str = ""
    title: str = ""
    sentiment: SentimentLabel
    confidence: float = 0.0
    mention_count: int = 1
    excerpt: str = ""


class SentimentResult(CamelModel):
    """Aggregate binary sentiment for one brand on a 0-10 scale."""

    sentiment_score: float = NEUTRAL_SENTIMENT
    sentiment_breakdown: SentimentBreakdown = Field(default_factory=SentimentBreakdown)
    total_mentions: int = 0
    sentiment_details: list[SentimentDetail] = Field(default_factory=list)
    analysis_context: str = ""
    error: str | None = None

    @field_validator("sentiment_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: object) -> float:
        try:
            return clamp(float(value), 0.0, 10.0)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return NEUTRAL_SENTIMENT

    @classmethod
    def neutral(cls, analysis_context: str = "", error: str | None = None) -> "SentimentResult":
        return cls(analysis_context=analysis_context, error=error)


class CompetitorAnalysis(CamelModel):
    """Result of one competitor branch (discovery, Reddit search, filter, sentiment)."""

    name: str
    website: str = ""
    company_size: str = UNKNOWN_COMPANY_SIZE
    sentiment: SentimentResult = Field(default_factory=SentimentResult)
    mentions: int | None = None
    threads_analyzed: int = 0
    error: str | None = None
