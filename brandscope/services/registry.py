"""Registry of the tools, agents and workflows exposed over HTTP."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field

from brandscope.schemas.common import AdditionalIdentifiers, CamelModel
from brandscope.schemas.relevance import BrandRelevanceEvaluation, EvaluatedSearchResult
from brandscope.schemas.scorecard import BrandAnalysisRequest
from brandscope.schemas.search import RedditThread, SearchDepth, SearchResult, SearchType
from brandscope.services import (
    brand_search,
    company_sizing,
    competitor_discovery,
    content_extraction,
    reddit_search,
    relevance,
    sentiment,
)
from brandscope.services.pipeline_orchestrator import BrandResearchPipeline, ProgressCallback
from brandscope.services.research_context import ResearchContext
from brandscope.services.scorecard_store import ScorecardStore

logger = logging.getLogger(__name__)


# Tool inputs


class BrandWebSearchInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    search_type: SearchType = "official"
    additional_identifiers: AdditionalIdentifiers | None = None


class BrandRelevancyInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    result: SearchResult
    existing_urls: list[str] = Field(default_factory=list)
    additional_identifiers: AdditionalIdentifiers | None = None


class ScoredSearchResult(CamelModel):
    title: str = ""
    url: str
    content: str = ""
    is_official_site: bool = False
    confidence_score: int = 0


class BrandContentExtractionInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    results: list[ScoredSearchResult] = Field(default_factory=list)
    additional_identifiers: AdditionalIdentifiers | None = None


class CompanySizingToolInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    official_domain: str | None = None
    industry: str | None = None
    founding_year: str | None = None


class RedditSearchToolInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    subreddits: list[str] = Field(default_factory=list)
    max_results: int = Field(default=10, ge=1, le=50)
    search_depth: SearchDepth = "shallow"


class RedditRelevancyInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    thread: RedditThread
    brand_categories: list[str] = Field(default_factory=list)
    threshold_score: int | None = Field(default=None, ge=0, le=100)
    existing_urls: list[str] = Field(default_factory=list)


class CompetitorDiscoveryToolInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    reddit_results: list[RedditThread] = Field(default_factory=list)
    max_competitors: int = Field(default=4, ge=0, le=10)


class SentimentAnalysisToolInput(CamelModel):
    brand_name: str = Field(min_length=1)
    brand_context: str | None = None
    reddit_results: list[RedditThread] = Field(default_factory=list)


@dataclass(frozen=True)
class Tool:
    """A single pipeline operation callable on its own."""

    id: str
    description: str
    input_schema: type[CamelModel]
    execute: Callable[[Any], Awaitable[BaseModel]]

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "inputSchema": self.input_schema.model_json_schema(by_alias=True),
        }


async def _claimed_context(namespace: str, urls: list[str]) -> ResearchContext:
    ctx = ResearchContext()
    for url in urls:
        await ctx.claim_url(namespace, url)
    return ctx


async def _brand_web_search(data: BrandWebSearchInput) -> BaseModel:
    return await brand_search.search_brand(
        data.brand_name, data.brand_context, data.search_type, data.additional_identifiers
    )


async def _brand_relevancy(data: BrandRelevancyInput) -> BaseModel:
    ctx = await _claimed_context(data.brand_name, data.existing_urls)
    return await relevance.evaluate_search_result(
        ctx, data.result, data.brand_name, data.brand_context, data.additional_identifiers
    )


async def _brand_content_extraction(data: BrandContentExtractionInput) -> BaseModel:
    evaluated = [
        EvaluatedSearchResult(
            title=item.title,
            url=item.url,
            content=item.content,
            evaluation=BrandRelevanceEvaluation(
                is_official_site=item.is_official_site,
                confidence_score=item.confidence_score,
            ),
        )
        for item in data.results
    ]
    return await content_extraction.extract_brand_content(
        data.brand_name, evaluated, data.brand_context, data.additional_identifiers
    )


async def _company_sizing(data: CompanySizingToolInput) -> BaseModel:
    return await company_sizing.size_company(
        data.brand_name,
        data.brand_context,
        data.industry,
        data.founding_year,
        data.official_domain,
    )


async def _reddit_search(data: RedditSearchToolInput) -> BaseModel:
    return await reddit_search.search_reddit(
        data.brand_name,
        data.brand_context,
        data.subreddits,
        data.max_results,
        data.search_depth,
    )


async def _reddit_relevancy(data: RedditRelevancyInput) -> BaseModel:
    ctx = await _claimed_context(data.brand_name, data.existing_urls)
    return await relevance.evaluate_reddit_thread(
        ctx,
        data.thread,
        data.brand_name,
        data.brand_context,
        data.brand_categories,
        data.threshold_score,
    )


async def _competitor_discovery(data: CompetitorDiscoveryToolInput) -> BaseModel:
    return await competitor_discovery.discover_competitors(
        data.reddit_results, data.brand_name, data.brand_context, data.max_competitors
    )


async def _sentiment_analysis(data: SentimentAnalysisToolInput) -> BaseModel:
    return await sentiment.analyze_sentiment(
        data.reddit_results, data.brand_name, data.brand_context
    )


@lru_cache
def get_tool_registry() -> dict[str, Tool]:
    """Build the tool registry once."""
    tools = [
        Tool(
            "brand-web-search",
            "Search the web for brand-specific information with optimized queries and filtering",
            BrandWebSearchInput,
            _brand_web_search,
        ),
        Tool(
            "brand-relevancy",
            "Evaluate whether a search result is relevant to the brand and its official presence",
            BrandRelevancyInput,
            _brand_relevancy,
        ),
        Tool(
            "brand-content-extraction",
            "Extract structured brand information from verified brand content",
            BrandContentExtractionInput,
            _brand_content_extraction,
        ),
        Tool(
            "company-sizing",
            "Determine company size using business intelligence and third-party sources",
            CompanySizingToolInput,
            _company_sizing,
        ),
        Tool(
            "reddit-search",
            "Search Reddit for brand mentions, discussions and comparisons",
            RedditSearchToolInput,
            _reddit_search,
        ),
        Tool(
            "reddit-relevancy",
            "Evaluate whether a Reddit thread is relevant to the brand",
            RedditRelevancyInput,
            _reddit_relevancy,
        ),
        Tool(
            "competitor-discovery",
            "Identify competitor brands mentioned in Reddit discussions",
            CompetitorDiscoveryToolInput,
            _competitor_discovery,
        ),
        Tool(
            "sentiment-analysis",
            "Score binary sentiment toward a brand across Reddit discussions",
            SentimentAnalysisToolInput,
            _sentiment_analysis,
        ),
    ]
    return {tool.id: tool for tool in tools}


# Agents and workflows

DISCOVERY_STEPS = ["brand-search", "brand-relevance", "content-extraction", "company-sizing"]
SCORECARD_STEPS = [
    *DISCOVERY_STEPS,
    "reddit-search",
    "reddit-relevance",
    "competitor-discovery",
    "sentiment-analysis",
    "competitor-analysis",
    "scorecard-assembly",
]


@dataclass(frozen=True)
class Workflow:
    name: str
    description: str
    steps: list[str] = field(default_factory=list)

    def describe(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "steps": list(self.steps)}


@dataclass(frozen=True)
class AgentEndpoint:
    """A named entry point that runs one workflow for a brand request."""

    name: str
    description: str
    workflow: Workflow
    run: Callable[[BrandAnalysisRequest, ProgressCallback | None], Awaitable[BaseModel]]

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "workflow": self.workflow.name,
            "tools": [tool_id for tool_id in get_tool_registry()],
        }


async def _run_discovery(
    request: BrandAnalysisRequest,
    on_progress: ProgressCallback | None = None,
) -> BaseModel:
    return await BrandResearchPipeline(on_progress=on_progress).run_brand_discovery(request)


async def _run_scorecard(
    request: BrandAnalysisRequest,
    on_progress: ProgressCallback | None = None,
) -> BaseModel:
    pipeline = BrandResearchPipeline(store=ScorecardStore(), on_progress=on_progress)
    return await pipeline.run_scorecard(request)


BRAND_DISCOVERY_WORKFLOW = Workflow(
    "brandDiscoveryWorkflow",
    "Find a brand's official site, extract its profile and estimate its size",
    DISCOVERY_STEPS,
)
BRAND_SCORECARD_WORKFLOW = Workflow(
    "brandScorecardWorkflow",
    "Full brand research: discovery, Reddit analysis, competitors, sentiment and scorecard",
    SCORECARD_STEPS,
)


@lru_cache
def get_agent_registry() -> dict[str, AgentEndpoint]:
    agents = [
        AgentEndpoint(
            "brandDiscoveryAgent",
            "Brand discovery: official presence, profile and company size",
            BRAND_DISCOVERY_WORKFLOW,
            _run_discovery,
        ),
        AgentEndpoint(
            "brandAnalysisAgent",
            "Brand analysis: generates a complete brand scorecard",
            BRAND_SCORECARD_WORKFLOW,
            _run_scorecard,
        ),
    ]
    return {agent.name: agent for agent in agents}


def get_workflows() -> list[Workflow]:
    return [BRAND_DISCOVERY_WORKFLOW, BRAND_SCORECARD_WORKFLOW]
