"""Scorecard, workflow request and progress schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import Field

from brandscope.schemas.brand import BrandProfile, SizingResult
from brandscope.schemas.common import AdditionalIdentifiers, CamelModel

ScorecardStatus = Literal["generating", "completed", "failed"]
StepStatus = Literal["pending", "in-progress", "completed", "failed"]
ThreadSentiment = Literal["positive", "negative", "neutral"]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatMessage(CamelModel):
    role: str = "user"
    content: str = ""


class BrandAnalysisRequest(CamelModel):
    """Input accepted by the discovery and scorecard workflows."""

    brand_name: str = Field(min_length=1, max_length=200)
    brand_context: str | None = None
    brand_url: str | None = None
    additional_identifiers: AdditionalIdentifiers | None = None
    subreddits: list[str] = Field(default_factory=list)
    max_competitors: int | None = Field(default=None, ge=0, le=10)


class GenerationStep(CamelModel):
    """One progress event emitted while a workflow runs."""

    step: str
    status: StepStatus
    message: str
    timestamp: str = Field(default_factory=utc_now_iso)


class ScorecardThread(CamelModel):
    title: str
    url: str
    subreddit: str
    score: int = 0
    comments: int = 0
    sentiment: ThreadSentiment = "neutral"
    excerpt: str = ""


class ScorecardMentions(CamelModel):
    brand: int = 0
    competitors: dict[str, int] = Field(default_factory=dict)


class ScorecardSentiment(CamelModel):
    brand: float = 5.0
    competitors: dict[str, float] = Field(default_factory=dict)


class ScorecardCompetitorProfile(CamelModel):
    website: str = ""
    company_size: str = "Unknown"


class Scorecard(CamelModel):
    """Terminal aggregate of one brand research run."""

    id: str
    brand_name: str
    brand_website: str = ""
    company_size: str = "Unknown"
    competitors: list[str] = Field(default_factory=list)
    competitor_profiles: dict[str, ScorecardCompetitorProfile] = Field(default_factory=dict)
    subreddits: list[str] = Field(default_factory=list)
    mentions: ScorecardMentions = Field(default_factory=ScorecardMentions)
    threads: list[ScorecardThread] = Field(default_factory=list)
    sentiment: ScorecardSentiment = Field(default_factory=ScorecardSentiment)
    created_at: str = Field(default_factory=utc_now_iso)
    status: ScorecardStatus = "generating"
    generation_progress: list[GenerationStep] = Field(default_factory=list)


class DiscoverySource(CamelModel):
    url: str
    confidence_score: int


class DiscoverySearchMetadata(CamelModel):
    confidence: float = 0.0
    sources: list[DiscoverySource] = Field(default_factory=list)
    disambiguation: str = ""


class BrandDiscoveryReport(CamelModel):
    """Output of the discovery-only workflow (search through sizing)."""

    brand_name: str
    brand_website: str = ""
    brand_data: BrandProfile | None = None
    sizing_data: SizingResult | None = None
    search_metadata: DiscoverySearchMetadata = Field(default_factory=DiscoverySearchMetadata)
    errors: dict[str, str] = Field(default_factory=dict)


class AgentGenerateRequest(CamelModel):
    """Body of ``POST /agents/{name}/generate`` and ``/stream``.

    Either ``brand_name`` or a user message naming the brand in quotes.
    """

    brand_name: str | None = None
    brand_context: str | None = None
    brand_url: str | None = None
    additional_identifiers: AdditionalIdentifiers | None = None
    subreddits: list[str] = Field(default_factory=list)
    max_competitors: int | None = Field(default=None, ge=0, le=10)
    messages: list[ChatMessage] = Field(default_factory=list)
    max_steps: int | None = None


class AgentGenerateResponse(CamelModel):
    object: dict[str, Any]
    text: str
