"""Brand profile and company sizing schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from brandscope.schemas.common import CamelModel

ConfidenceLevel = Literal["high", "medium", "low"]
CompanySize = Literal["Startup", "Growth", "Mid-Market", "Large Enterprise", "Unicorn"]

NO_RELEVANT_RESULTS_ERROR = "No sufficiently relevant results found for brand extraction"
UNKNOWN_COMPANY_SIZE = "Unknown"


class BrandAdditionalContext(CamelModel):
    founding_year: str | None = None
    headquarters: str | None = None
    global_presence: str | None = None
    market_position: str | None = None


class BrandFieldConfidence(CamelModel):
    description: ConfidenceLevel = "low"
    topics: ConfidenceLevel = "low"
    categories: ConfidenceLevel = "low"
    additional_context: ConfidenceLevel = "low"


class BrandProfile(CamelModel):
    """Structured brand profile extracted from verified sources."""

    description: str = Field(description="Single sentence describing what the brand does")
    topics: list[str] = Field(min_length=3, max_length=7)
    categories: list[str] = Field(min_length=1, max_length=5)
    additional_context: BrandAdditionalContext = Field(default_factory=BrandAdditionalContext)
    confidence: BrandFieldConfidence = Field(default_factory=BrandFieldConfidence)
    extraction_notes: str = ""


class ExtractionMetadata(CamelModel):
    sources_used: int
    source_urls: list[str] = Field(default_factory=list)
    average_confidence_score: float = 0.0
    has_official_sites: bool = False


class ExtractionResult(CamelModel):
    """Outcome of content extraction; check ``success`` before ``brand_data``."""

    success: bool
    brand_data: BrandProfile | None = None
    extraction_metadata: ExtractionMetadata | None = None
    error: str | None = None


class SizingQuery(CamelModel):
    """One domain-targeted search used for company sizing."""

    query: str
    type: str
    domains: list[str] = Field(default_factory=list)


class SizingKeyIndicators(CamelModel):
    revenue: str | None = None
    employees: str | None = None
    valuation: str | None = None
    funding_stage: str | None = None
    market_cap: str | None = None
    founding_year: str | None = None
    last_funding: str | None = None


class SizingResult(CamelModel):
    """Company size classification with supporting evidence."""

    company_size: CompanySize
    confidence: ConfidenceLevel
    key_indicators: SizingKeyIndicators = Field(default_factory=SizingKeyIndicators)
    sources: list[str] = Field(default_factory=list)
    reasoning: str = ""
    data_quality: str = ""
    conflicting_info: str | None = None

    @classmethod
    def fallback(cls) -> "SizingResult":
        """Tier used when no sizing evidence is found at all.

        Companies people actively research are most often mid-scale, so the
        default is ``Growth`` with ``low`` confidence.
        """
        return cls(
            company_size="Growth",
            confidence="low",
            sources=["fallback"],
            reasoning="No sizing data found from any source; defaulted to Growth tier.",
            data_quality="none",
        )


class SizingSearchMetadata(CamelModel):
    total_results: int = 0
    search_types: list[str] = Field(default_factory=list)
    source_urls: list[str] = Field(default_factory=list)
    targeted_domains: list[str] = Field(default_factory=list)


class SizingOutcome(CamelModel):
    """Outcome of company sizing; check ``success`` before ``sizing_data``."""

    success: bool
    sizing_data: SizingResult | None = None
    search_metadata: SizingSearchMetadata | None = None
    used_fallback: bool = False
    error: str | None = None
