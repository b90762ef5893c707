"""Relevance classifier schemas for web results and Reddit threads."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from brandscope.schemas.common import CamelModel, clamp_confidence
from brandscope.schemas.search import RedditThread, SearchResult

ERROR_REASONING = "Error in evaluation process"
ALREADY_PROCESSED_REASONING = "URL already processed"

RelevanceType = Literal[
    "direct_mention",
    "comparison",
    "user_experience",
    "support_discussion",
    "industry_discussion",
    "competitor_mention",
    "irrelevant",
]


class BrandRelevanceSignals(CamelModel):
    """Boolean evidence flags behind a brand relevance verdict."""

    domain_match: bool = False
    context_match: bool = False
    content_consistency: bool = False
    has_about_page: bool = False
    industry_alignment: bool = False
    already_processed: bool = False


class BrandRelevanceEvaluation(CamelModel):
    """Model verdict on whether a web result is the brand's official presence."""

    is_official_site: bool = False
    confidence_score: int = Field(default=0, description="Overall relevance, 0-100")
    signals: BrandRelevanceSignals = Field(default_factory=BrandRelevanceSignals)
    reasoning: str = ""
    brand_match: bool = Field(
        default=False,
        description="True if this is definitely the intended brand, not a namesake",
    )

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> int:
        return clamp_confidence(value)

    @classmethod
    def failed(cls) -> "BrandRelevanceEvaluation":
        return cls(reasoning=ERROR_REASONING)

    @classmethod
    def already_processed(cls) -> "BrandRelevanceEvaluation":
        return cls(
            signals=BrandRelevanceSignals(already_processed=True),
            reasoning=ALREADY_PROCESSED_REASONING,
        )


class RedditRelevanceSignals(CamelModel):
    """Boolean evidence flags behind a Reddit relevance verdict."""

    direct_brand_mention: bool = False
    contextual_relevance: bool = False
    user_experience: bool = False
    competitor_comparison: bool = False
    high_engagement: bool = False
    subreddit_alignment: bool = False
    already_processed: bool = False


class SentimentIndicators(CamelModel):
    has_sentiment: bool = False
    sentiment_clarity: int = 0

    @field_validator("sentiment_clarity", mode="before")
    @classmethod
    def _clamp_clarity(cls, value: object) -> int:
        return clamp_confidence(value)


class CompetitorValue(CamelModel):
    has_competitor_mentions: bool = False
    competitor_discovery_value: int = 0

    @field_validator("competitor_discovery_value", mode="before")
    @classmethod
    def _clamp_value(cls, value: object) -> int:
        return clamp_confidence(value)


class RedditRelevanceVerdict(CamelModel):
    """Structured model output for a Reddit thread."""

    is_relevant: bool = False
    confidence_score: int = Field(default=0, description="Relevance confidence, 0-100")
    relevance_type: RelevanceType = "irrelevant"
    signals: RedditRelevanceSignals = Field(default_factory=RedditRelevanceSignals)
    reasoning: str = ""
    sentiment_indicators: SentimentIndicators = Field(default_factory=SentimentIndicators)
    competitor_value: CompetitorValue = Field(default_factory=CompetitorValue)

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> int:
        return clamp_confidence(value)


class RedditRelevanceEvaluation(RedditRelevanceVerdict):
    """Reddit verdict plus the threshold gate applied by the filter."""

    meets_threshold: bool = False
    threshold_used: int = 70

    @classmethod
    def from_verdict(
        cls,
        verdict: RedditRelevanceVerdict,
        threshold: int,
    ) -> "RedditRelevanceEvaluation":
        return cls(
            **verdict.model_dump(),
            meets_threshold=verdict.confidence_score >= threshold,
            threshold_used=threshold,
        )

    @classmethod
    def failed(cls, threshold: int = 70) -> "RedditRelevanceEvaluation":
        return cls(reasoning=ERROR_REASONING, threshold_used=threshold)

    @classmethod
    def already_processed(cls, threshold: int = 70) -> "RedditRelevanceEvaluation":
        return cls(
            signals=RedditRelevanceSignals(already_processed=True),
            reasoning=ALREADY_PROCESSED_REASONING,
            threshold_used=threshold,
        )


class EvaluatedSearchResult(SearchResult):
    """A web result paired with its relevance evaluation."""

    evaluation: BrandRelevanceEvaluation

    @property
    def is_official_site(self) -> bool:
        return self.evaluation.is_official_site

    @property
    def confidence_score(self) -> int:
        return self.evaluation.confidence_score


class EvaluatedThread(RedditThread):
    """A Reddit thread paired with its relevance evaluation."""

    evaluation: RedditRelevanceEvaluation
