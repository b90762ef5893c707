"""Brand relevance agent: is this search result the brand's official presence?"""

import logging

from pydantic import BaseModel

from brandscope.agents.base_agent import BaseAgent
from brandscope.schemas.common import AdditionalIdentifiers
from brandscope.schemas.relevance import BrandRelevanceEvaluation
from brandscope.schemas.search import SearchResult

logger = logging.getLogger(__name__)


class BrandRelevanceInput(BaseModel):
    """Input for the brand relevance agent."""

    brand_name: str
    brand_context: str | None = None
    additional_identifiers: AdditionalIdentifiers | None = None
    result: SearchResult


class BrandRelevanceAgent(BaseAgent[BrandRelevanceInput, BrandRelevanceEvaluation]):
    """Agent that scores one web search result for a target brand.

    The confidence score is taken as asserted by the model; the schema clamps
    it into [0, 100].
    """

    model_tier = "fast"
    temperature = 0.1

    @property
    def system_prompt(self) -> str:
        return """You are a brand verification analyst. Given one web search result and a
target brand, decide whether the result is about that exact brand and whether it
is the brand's own official website.

Rules:
- Several companies can share a name. Use the supplied context (industry,
  location, products) to tell them apart; set brandMatch=false for namesakes.
- isOfficialSite is true only for pages hosted on the brand's own domain.
- Directories, encyclopedias, social networks, news and review sites are never
  official, even when they are accurate.
- confidenceScore is 0-100 and reflects overall relevance to the intended brand.
- Keep reasoning to one or two sentences."""

    @property
    def output_type(self) -> type[BrandRelevanceEvaluation]:
        return BrandRelevanceEvaluation

    def _build_prompt(self, input_data: BrandRelevanceInput) -> str:
        context_lines: list[str] = []
        if input_data.brand_context:
            context_lines.append(f"Brand context: {input_data.brand_context}")
        identifiers = input_data.additional_identifiers
        if identifiers:
            if identifiers.industry:
                context_lines.append(f"Industry: {identifiers.industry}")
            if identifiers.location:
                context_lines.append(f"Location: {identifiers.location}")
            if identifiers.products:
                context_lines.append(f"Products/Services: {', '.join(identifiers.products)}")

        result = input_data.result
        score_line = (
            f"\nPreliminary score: {result.preliminary_score}" if result.preliminary_score else ""
        )
        return f"""Evaluate whether this search result is relevant to the brand "{input_data.brand_name}" \
and whether it represents the brand's official presence.\
{self._format_context_lines(context_lines, "Additional Context")}

Search result to evaluate:
Title: {result.title}
URL: {result.url}
Content snippet: {result.content[:1000]}{score_line}

Set the signal flags: domainMatch, contextMatch, contentConsistency, hasAboutPage,
industryAlignment. Leave alreadyProcessed false."""
