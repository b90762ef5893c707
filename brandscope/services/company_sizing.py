"""Company sizing from domain-targeted business intelligence searches."""

from __future__ import annotations

import logging

from brandscope.agents.company_sizing import CompanySizingAgent, CompanySizingInput
from brandscope.config import settings
from brandscope.core.concurrency import gather_settled
from brandscope.integrations.exa import ExaClient
from brandscope.schemas.brand import (
    SizingOutcome,
    SizingQuery,
    SizingResult,
    SizingSearchMetadata,
)
from brandscope.services.summarization import summarize_or_truncate

logger = logging.getLogger(__name__)


def _query(*parts: str) -> str:
    return " ".join(" ".join(parts).split())


def construct_sizing_queries(
    brand_name: str,
    brand_context: str | None = None,
    industry: str | None = None,
) -> list[SizingQuery]:
    """Return the four sizing searches, highest-signal sources first."""
    quoted = f'"{brand_name}"'
    context = brand_context or industry or ""
    return [
        SizingQuery(
            query=_query(quoted, context, "employees headcount team size"),
            type="employee-data",
            domains=["linkedin.com", "glassdoor.com"],
        ),
        SizingQuery(
            query=_query(quoted, context, "funding Series revenue valuation"),
            type="funding-data",
            domains=["crunchbase.com", "pitchbook.com", "techcrunch.com"],
        ),
        SizingQuery(
            query=_query(quoted, context, 'revenue "annual revenue" "market cap"'),
            type="financial-data",
            domains=["bloomberg.com", "reuters.com", "sec.gov"],
        ),
        SizingQuery(
            query=_query(quoted, 'IPO "went public" "stock ticker" NYSE NASDAQ'),
            type="public-status",
            domains=["sec.gov", "finance.yahoo.com", "bloomberg.com"],
        ),
    ]


async def _run_sizing_search(
    exa: ExaClient,
    brand_name: str,
    config: SizingQuery,
) -> list[dict[str, str]]:
    rows = await exa.search_and_contents(
        config.query,
        num_results=settings.sizing_num_results,
        include_domains=config.domains or None,
        livecrawl="never",
    )
    tagged: list[dict[str, str]] = []
    for row in rows:
        text = row.get("text") or ""
        content = text or "No content available"
        if len(text) > settings.summary_min_chars:
            content = await summarize_or_truncate(
                subject=brand_name,
                title=row.get("title") or "",
                url=row["url"],
                content=text,
                focus=(
                    "company size indicators: employee counts, revenue, funding, valuation, "
                    "market cap, and growth metrics"
                ),
                fallback_chars=settings.summary_min_chars,
            )
        tagged.append({**row, "content": content, "search_type": config.type})
    return tagged


async def size_company(
    brand_name: str,
    brand_context: str | None = None,
    industry: str | None = None,
    founding_year: str | None = None,
    official_domain: str | None = None,
) -> SizingOutcome:
    """Classify company size. Never raises.

    Zero search results yield the deterministic low-confidence fallback;
    a classifier failure is reported with ``success=False``.
    """
    queries = construct_sizing_queries(brand_name, brand_context, industry)
    targeted_domains = [domain for config in queries for domain in config.domains]

    rows: list[dict[str, str]] = []
    try:
        async with ExaClient() as exa:
            outcomes = await gather_settled(
                [_run_sizing_search(exa, brand_name, config) for config in queries],
                limit=len(queries),
            )
    except Exception as e:
        logger.warning("Sizing search unavailable", extra={"brand": brand_name, "error": str(e)})
        outcomes = []

    for config, outcome in zip(queries, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning(
                "Sizing search failed",
                extra={"brand": brand_name, "search_type": config.type, "error": str(outcome)},
            )
            continue
        rows.extend(outcome)

    if not rows:
        logger.info("No sizing data found, using fallback tier", extra={"brand": brand_name})
        return SizingOutcome(
            success=True,
            sizing_data=SizingResult.fallback(),
            search_metadata=SizingSearchMetadata(targeted_domains=targeted_domains),
            used_fallback=True,
        )

    combined = "\n".join(
        f"Source: {row['url']} (Search: {row['search_type']})\n"
        f"Title: {row.get('title') or ''}\nContent: {row['content']}\n---\n"
        for row in rows
    )
    metadata = SizingSearchMetadata(
        total_results=len(rows),
        search_types=list(dict.fromkeys(row["search_type"] for row in rows)),
        source_urls=[row["url"] for row in rows],
        targeted_domains=targeted_domains,
    )

    try:
        agent = CompanySizingAgent()
        sizing = await agent.run(
            CompanySizingInput(
                brand_name=brand_name,
                brand_context=brand_context,
                industry=industry,
                founding_year=founding_year,
                official_domain=official_domain,
                combined_content=combined,
                max_chars=settings.sizing_max_chars,
            )
        )
    except Exception as e:
        logger.warning("Company sizing failed", extra={"brand": brand_name, "error": str(e)})
        return SizingOutcome(
            success=False,
            search_metadata=metadata,
            error=str(e) or "Unknown error in sizing analysis",
        )

    logger.info(
        "Company sizing completed",
        extra={
            "brand": brand_name,
            "size": sizing.company_size,
            "confidence": sizing.confidence,
            "results": len(rows),
        },
    )
    return SizingOutcome(success=True, sizing_data=sizing, search_metadata=metadata)
