"""Brand web search: query construction, heuristic pre-scoring and dedupe."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from brandscope.config import settings
from brandscope.integrations.exa import ExaClient
from brandscope.schemas.common import AdditionalIdentifiers
from brandscope.schemas.search import BrandSearchResponse, SearchResult, SearchType
from brandscope.services.summarization import summarize_or_truncate

logger = logging.getLogger(__name__)

NO_RESULTS_ERROR = "No results found"

_THIRD_PARTY_MARKERS = ("wikipedia", "linkedin", "facebook", "twitter", "news", "review")
_NON_OFFICIAL_PATH_MARKERS = ("news", "review", "blog")
_OFFICIAL_CONTENT_MARKERS = ("official", "homepage", "about us")


def _join(*parts: str) -> str:
    return " ".join(part for part in " ".join(parts).split() if part)


def construct_brand_queries(
    brand_name: str,
    brand_context: str | None = None,
    search_type: SearchType = "official",
    additional_identifiers: AdditionalIdentifiers | None = None,
) -> list[str]:
    """Build the ordered search queries for one brand.

    Always ends with the bare quoted brand name as a last resort.
    """
    identifiers = additional_identifiers or AdditionalIdentifiers()
    context = brand_context or identifiers.industry or ""
    quoted = f'"{brand_name}"'

    queries: list[str] = []
    if search_type == "official":
        queries.append(_join(quoted, context, "official website"))
        queries.append(_join(brand_name, context, "company homepage"))
        if identifiers.location:
            queries.append(_join(quoted, context, identifiers.location, "official site"))
    elif search_type == "about":
        queries.append(_join(quoted, context, "about company history"))
        queries.append(_join(brand_name, context, "company information"))
    else:
        queries.append(_join(quoted, context))
        if identifiers.products:
            queries.append(_join(brand_name, identifiers.products[0], context))

    queries.append(quoted)
    return queries


def calculate_preliminary_score(
    result: Mapping[str, str],
    brand_name: str,
    brand_context: str | None = None,
) -> int:
    """Score how likely a raw search row is the brand's own site, 0-100."""
    url = (result.get("url") or "").lower()
    title = (result.get("title") or "").lower()
    content = (result.get("text") or "").lower()
    brand = brand_name.lower()

    score = 0
    if brand.replace(" ", "") in url or "-".join(brand.split()) in url:
        score += 40
    if ".com" in url and not any(marker in url for marker in _NON_OFFICIAL_PATH_MARKERS):
        score += 20
    if brand in title:
        score += 15
    if any(marker in content for marker in _OFFICIAL_CONTENT_MARKERS):
        score += 10
    if brand_context and brand_context.lower() in content:
        score += 10
    if any(marker in url for marker in _THIRD_PARTY_MARKERS):
        score -= 20

    return max(0, min(100, score))


def remove_duplicate_urls(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Keep the first occurrence of each exact URL."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        unique.append(result)
    return unique


async def search_brand(
    brand_name: str,
    brand_context: str | None = None,
    search_type: SearchType = "official",
    additional_identifiers: AdditionalIdentifiers | None = None,
) -> BrandSearchResponse:
    """Search the web for a brand and return pre-scored, deduplicated results.

    Queries run in order until one returns enough rows. A failing query is
    skipped. Never raises: a missing API key or zero rows is reported in
    ``error``.
    """
    queries = construct_brand_queries(
        brand_name, brand_context, search_type, additional_identifiers
    )
    logger.info("Brand search started", extra={"brand": brand_name, "queries": queries})

    rows: list[dict[str, str]] = []
    try:
        async with ExaClient() as exa:
            for query in queries:
                try:
                    found = await exa.search_and_contents(
                        query,
                        num_results=settings.brand_search_num_results,
                        livecrawl="always",
                    )
                except Exception as e:
                    logger.warning(
                        "Brand search query failed",
                        extra={"brand": brand_name, "query": query, "error": str(e)},
                    )
                    continue
                rows.extend(found)
                if len(found) >= settings.brand_search_early_exit:
                    break
    except Exception as e:
        logger.warning("Brand search failed", extra={"brand": brand_name, "error": str(e)})
        return BrandSearchResponse(search_queries=queries, error=str(e))

    if not rows:
        return BrandSearchResponse(search_queries=queries, error=NO_RESULTS_ERROR)

    processed: list[SearchResult] = []
    for row in rows:
        text = row.get("text") or ""
        content = text or "No content available"
        if settings.summarize_search_results and len(text) >= 100:
            context_note = f" ({brand_context})" if brand_context else ""
            content = await summarize_or_truncate(
                subject=f"{brand_name}{context_note}",
                title=row.get("title") or "",
                url=row["url"],
                content=text,
                focus=(
                    "information about the brand itself, company details, official presence "
                    "markers, and any indicators this might be the brand's official website"
                ),
            )
        processed.append(
            SearchResult(
                title=row.get("title") or "",
                url=row["url"],
                content=content,
                preliminary_score=calculate_preliminary_score(row, brand_name, brand_context),
            )
        )

    unique = remove_duplicate_urls(processed)
    unique.sort(key=lambda result: result.preliminary_score, reverse=True)
    logger.info(
        "Brand search completed",
        extra={"brand": brand_name, "raw_results": len(rows), "unique_results": len(unique)},
    )
    return BrandSearchResponse(
        results=unique[: settings.brand_search_max_results],
        search_queries=queries,
    )
