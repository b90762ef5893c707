"""Structured brand profile extraction from gated search results."""

from __future__ import annotations

import logging

from brandscope.agents.brand_content_extractor import (
    BrandContentExtractionAgent,
    BrandContentInput,
)
from brandscope.config import settings
from brandscope.schemas.brand import (
    NO_RELEVANT_RESULTS_ERROR,
    ExtractionMetadata,
    ExtractionResult,
)
from brandscope.schemas.common import AdditionalIdentifiers
from brandscope.schemas.relevance import EvaluatedSearchResult

logger = logging.getLogger(__name__)


def select_extraction_sources(
    evaluated: list[EvaluatedSearchResult],
) -> list[EvaluatedSearchResult]:
    """Pick the sources to extract from.

    Confident official sites when any exist, otherwise the two most confident
    results above the fallback threshold, otherwise nothing.
    """
    official = [
        result
        for result in evaluated
        if result.is_official_site and result.confidence_score >= settings.brand_relevance_threshold
    ]
    if official:
        return official

    fallback = sorted(
        (r for r in evaluated if r.confidence_score >= settings.brand_fallback_threshold),
        key=lambda r: r.confidence_score,
        reverse=True,
    )
    return fallback[:2]


def combine_source_content(sources: list[EvaluatedSearchResult]) -> str:
    return "\n".join(
        f"Source: {source.url}\nTitle: {source.title}\nContent: {source.content}\n---\n"
        for source in sources
    )


async def extract_brand_content(
    brand_name: str,
    evaluated: list[EvaluatedSearchResult],
    brand_context: str | None = None,
    additional_identifiers: AdditionalIdentifiers | None = None,
) -> ExtractionResult:
    """Extract a BrandProfile from the strongest evaluated results. Never raises."""
    sources = select_extraction_sources(evaluated)
    if not sources:
        logger.info("No sources eligible for extraction", extra={"brand": brand_name})
        return ExtractionResult(success=False, error=NO_RELEVANT_RESULTS_ERROR)

    try:
        agent = BrandContentExtractionAgent()
        profile = await agent.run(
            BrandContentInput(
                brand_name=brand_name,
                brand_context=brand_context,
                additional_identifiers=additional_identifiers,
                combined_content=combine_source_content(sources),
                max_chars=settings.extraction_max_chars,
            )
        )
    except Exception as e:
        logger.warning(
            "Brand content extraction failed",
            extra={"brand": brand_name, "error": str(e)},
        )
        return ExtractionResult(success=False, error=str(e) or "Unknown error in extraction")

    metadata = ExtractionMetadata(
        sources_used=len(sources),
        source_urls=[source.url for source in sources],
        average_confidence_score=sum(s.confidence_score for s in sources) / len(sources),
        has_official_sites=any(source.is_official_site for source in sources),
    )
    logger.info(
        "Brand content extraction completed",
        extra={
            "brand": brand_name,
            "sources_used": metadata.sources_used,
            "average_confidence": metadata.average_confidence_score,
        },
    )
    return ExtractionResult(success=True, brand_data=profile, extraction_metadata=metadata)
