"""Brand research pipeline orchestrator.

Runs the stages in order for the target brand, then fans out one branch per
discovered competitor. Every stage is a fail-soft boundary: an exception is
logged and replaced by the stage's fallback value so the run always ends
with a scorecard.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar
from urllib.parse import urlparse

from brandscope.config import settings
from brandscope.core.concurrency import gather_settled
from brandscope.schemas.analysis import CompetitorAnalysis, CompetitorSet, SentimentResult
from brandscope.schemas.brand import UNKNOWN_COMPANY_SIZE, ExtractionResult, SizingOutcome
from brandscope.schemas.relevance import EvaluatedSearchResult, EvaluatedThread
from brandscope.schemas.scorecard import (
    BrandAnalysisRequest,
    BrandDiscoveryReport,
    DiscoverySearchMetadata,
    DiscoverySource,
    GenerationStep,
    Scorecard,
    StepStatus,
)
from brandscope.schemas.search import BrandSearchResponse, RedditSearchResponse
from brandscope.services import (
    brand_search,
    company_sizing,
    competitor_discovery,
    content_extraction,
    reddit_search,
    relevance,
    sentiment,
)
from brandscope.services.research_context import ResearchContext
from brandscope.services.scorecard import (
    assemble_scorecard,
    new_scorecard_id,
    resolve_brand_website,
    resolve_company_size,
)
from brandscope.services.scorecard_store import ScorecardStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[GenerationStep], Awaitable[None] | None]


class BrandResearchPipeline:
    """Orchestrates one brand research run."""

    def __init__(
        self,
        store: ScorecardStore | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.store = store
        self.on_progress = on_progress
        self.progress: list[GenerationStep] = []
        self.errors: dict[str, str] = {}
        self._scorecard_id: str | None = None

    async def _emit(self, step: str, status: StepStatus, message: str) -> None:
        event = GenerationStep(step=step, status=status, message=message)
        self.progress.append(event)
        if self.on_progress is not None:
            try:
                outcome = self.on_progress(event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.warning("Progress callback failed", extra={"step": step}, exc_info=True)
        if self.store is not None and self._scorecard_id is not None:
            try:
                await self.store.append_progress(self._scorecard_id, event)
            except Exception as e:
                logger.warning(
                    "Failed to persist progress",
                    extra={"scorecard_id": self._scorecard_id, "step": step, "error": str(e)},
                )

    async def _run_stage(
        self,
        step: str,
        message: str,
        operation: Callable[[], Awaitable[T]],
        fallback: Callable[[], T],
    ) -> T:
        """Run one stage, returning its fallback on any exception."""
        stage_info = {"step": step, "scorecard_id": self._scorecard_id}
        logger.info("Stage started", extra=stage_info)
        await self._emit(step, "in-progress", message)
        try:
            result = await operation()
        except Exception as e:
            logger.warning("Stage failed, using fallback", extra={**stage_info, "error": str(e)})
            self.errors[step] = str(e)
            await self._emit(step, "failed", f"{message} failed: {e}")
            return fallback()

        stage_error = getattr(result, "error", None)
        if stage_error:
            self.errors[step] = str(stage_error)
        logger.info("Stage completed", extra=stage_info)
        await self._emit(step, "completed", f"{message} done")
        return result

    async def _discover_brand(
        self,
        ctx: ResearchContext,
        request: BrandAnalysisRequest,
    ) -> tuple[list[EvaluatedSearchResult], ExtractionResult, SizingOutcome]:
        """Stages 1-4: search, relevance filter, extraction and sizing."""
        search_result = await self._run_stage(
            "brand-search",
            f"Searching the web for {request.brand_name}",
            lambda: brand_search.search_brand(
                request.brand_name,
                request.brand_context,
                "official",
                request.additional_identifiers,
            ),
            lambda: BrandSearchResponse(error="Brand search failed"),
        )
        evaluated = await self._run_stage(
            "brand-relevance",
            "Verifying search results",
            lambda: relevance.filter_search_results(
                ctx,
                search_result.results,
                request.brand_name,
                request.brand_context,
                request.additional_identifiers,
            ),
            list,
        )
        extraction = await self._run_stage(
            "content-extraction",
            "Extracting brand profile",
            lambda: content_extraction.extract_brand_content(
                request.brand_name,
                evaluated,
                request.brand_context,
                request.additional_identifiers,
            ),
            lambda: ExtractionResult(success=False, error="Content extraction failed"),
        )

        brand_data = extraction.brand_data
        identifiers = request.additional_identifiers
        industry = (identifiers.industry if identifiers else None) or (
            brand_data.categories[0] if brand_data and brand_data.categories else None
        )
        founding_year = brand_data.additional_context.founding_year if brand_data else None
        website = resolve_brand_website(evaluated, request.brand_url)
        official_domain = urlparse(website).netloc or None

        sizing = await self._run_stage(
            "company-sizing",
            "Estimating company size",
            lambda: company_sizing.size_company(
                request.brand_name,
                request.brand_context,
                industry,
                founding_year,
                official_domain,
            ),
            lambda: SizingOutcome(success=False, error="Company sizing failed"),
        )
        return evaluated, extraction, sizing

    async def _discover_competitor(
        self,
        ctx: ResearchContext,
        name: str,
    ) -> tuple[str, str, str | None]:
        """Competitor discovery without progress events.

        Returns the website, the company size and an error. A failure leaves
        the website empty and the size unknown so the branch can carry on.
        """
        try:
            found = await brand_search.search_brand(name, None, "official", None)
            evaluated = await relevance.filter_search_results(ctx, found.results, name, None, None)
            extraction = await content_extraction.extract_brand_content(name, evaluated, None, None)
            brand_data = extraction.brand_data
            website = resolve_brand_website(evaluated)
            sizing = await company_sizing.size_company(
                name,
                None,
                brand_data.categories[0] if brand_data and brand_data.categories else None,
                brand_data.additional_context.founding_year if brand_data else None,
                urlparse(website).netloc or None,
            )
        except Exception as e:
            logger.warning("Competitor discovery failed", extra={"competitor": name, "error": str(e)})
            return "", UNKNOWN_COMPANY_SIZE, str(e)
        return website, resolve_company_size(sizing), None

    async def _analyze_competitor(
        self,
        ctx: ResearchContext,
        name: str,
        request: BrandAnalysisRequest,
        categories: list[str],
    ) -> CompetitorAnalysis:
        """Competitor branch: discovery, Reddit search, relevance filter, sentiment."""
        website, company_size, discovery_error = await self._discover_competitor(ctx, name)
        found = await reddit_search.search_reddit(name, request.brand_context, request.subreddits)
        threads = await relevance.filter_reddit_threads(
            ctx, found.results, name, request.brand_context, categories
        )
        result = await sentiment.analyze_sentiment(threads, name, request.brand_context)
        return CompetitorAnalysis(
            name=name,
            website=website,
            company_size=company_size,
            sentiment=result,
            mentions=sum(reddit_search.count_brand_mentions(t.content, name) for t in threads),
            threads_analyzed=len(threads),
            error=discovery_error or found.error or result.error,
        )

    async def run_scorecard(self, request: BrandAnalysisRequest) -> Scorecard:
        """Run every stage and return a completed scorecard.

        An unexpected exception outside the stage boundaries yields a
        scorecard with status ``failed``.
        """
        scorecard_id = new_scorecard_id()
        self._scorecard_id = scorecard_id
        ctx = ResearchContext(run_id=scorecard_id)
        max_competitors = (
            settings.max_competitors if request.max_competitors is None else request.max_competitors
        )
        logger.info(
            "Scorecard run started",
            extra={"scorecard_id": scorecard_id, "brand": request.brand_name},
        )
        await self._store_call("start", scorecard_id, request.brand_name)

        try:
            evaluated, extraction, sizing = await self._discover_brand(ctx, request)
            categories = extraction.brand_data.categories if extraction.brand_data else []

            reddit_result = await self._run_stage(
                "reddit-search",
                f"Searching Reddit for {request.brand_name}",
                lambda: reddit_search.search_reddit(
                    request.brand_name, request.brand_context, request.subreddits
                ),
                lambda: RedditSearchResponse(error="Reddit search failed"),
            )
            threads: list[EvaluatedThread] = await self._run_stage(
                "reddit-relevance",
                "Filtering relevant discussions",
                lambda: relevance.filter_reddit_threads(
                    ctx,
                    reddit_result.results,
                    request.brand_name,
                    request.brand_context,
                    categories,
                ),
                list,
            )
            competitor_set = await self._run_stage(
                "competitor-discovery",
                "Identifying competitors",
                lambda: competitor_discovery.discover_competitors(
                    threads, request.brand_name, request.brand_context, max_competitors
                ),
                lambda: CompetitorSet(error="Competitor discovery failed"),
            )
            brand_sentiment = await self._run_stage(
                "sentiment-analysis",
                f"Analysing sentiment for {request.brand_name}",
                lambda: sentiment.analyze_sentiment(
                    threads, request.brand_name, request.brand_context
                ),
                lambda: SentimentResult.neutral(error="Sentiment analysis failed"),
            )
            analyses = await self._run_stage(
                "competitor-analysis",
                f"Analysing {len(competitor_set.competitors)} competitors",
                lambda: self._analyze_competitors(
                    ctx, competitor_set.competitors, request, categories
                ),
                list,
            )

            await self._emit("scorecard-assembly", "in-progress", "Assembling scorecard")
            scorecard = assemble_scorecard(
                brand_name=request.brand_name,
                evaluated_results=evaluated,
                brand_url=request.brand_url,
                sizing=sizing,
                competitor_set=competitor_set,
                brand_sentiment=brand_sentiment,
                competitor_analyses=analyses,
                threads=list(threads),
                fallback_subreddits=reddit_result.subreddits,
                progress=self.progress,
                scorecard_id=scorecard_id,
            )
            await self._emit("scorecard-assembly", "completed", "Scorecard ready")
            scorecard = scorecard.model_copy(update={"generation_progress": list(self.progress)})
        except Exception as e:
            logger.exception(
                "Scorecard run failed",
                extra={"scorecard_id": scorecard_id, "brand": request.brand_name},
            )
            await self._emit("scorecard-assembly", "failed", f"Scorecard assembly failed: {e}")
            scorecard = Scorecard(
                id=scorecard_id,
                brand_name=request.brand_name,
                brand_website=request.brand_url or "",
                status="failed",
                generation_progress=list(self.progress),
            )

        await self._store_call("save", scorecard)
        logger.info(
            "Scorecard run finished",
            extra={
                "scorecard_id": scorecard_id,
                "status": scorecard.status,
                "competitors": scorecard.competitors,
                "failed_stages": sorted(self.errors),
            },
        )
        return scorecard

    async def _analyze_competitors(
        self,
        ctx: ResearchContext,
        competitors: list[str],
        request: BrandAnalysisRequest,
        categories: list[str],
    ) -> list[CompetitorAnalysis]:
        if not competitors:
            return []
        outcomes = await gather_settled(
            [self._analyze_competitor(ctx, name, request, categories) for name in competitors],
            limit=len(competitors),
        )
        analyses: list[CompetitorAnalysis] = []
        for name, outcome in zip(competitors, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Competitor branch failed",
                    extra={"competitor": name, "error": str(outcome)},
                )
                analyses.append(
                    CompetitorAnalysis(
                        name=name,
                        sentiment=SentimentResult.neutral(error=str(outcome)),
                        mentions=0,
                        error=str(outcome),
                    )
                )
            else:
                analyses.append(outcome)
        return analyses

    async def run_brand_discovery(self, request: BrandAnalysisRequest) -> BrandDiscoveryReport:
        """Run stages 1-4 only and report the brand profile and size."""
        ctx = ResearchContext()
        logger.info("Brand discovery started", extra={"brand": request.brand_name})
        evaluated, extraction, sizing = await self._discover_brand(ctx, request)

        metadata = extraction.extraction_metadata
        brand_data = extraction.brand_data
        return BrandDiscoveryReport(
            brand_name=request.brand_name,
            brand_website=resolve_brand_website(evaluated, request.brand_url),
            brand_data=brand_data,
            sizing_data=sizing.sizing_data if sizing.success else None,
            search_metadata=DiscoverySearchMetadata(
                confidence=round(metadata.average_confidence_score / 100, 2) if metadata else 0.0,
                sources=[
                    DiscoverySource(url=result.url, confidence_score=result.confidence_score)
                    for result in evaluated
                ],
                disambiguation=(brand_data.extraction_notes if brand_data else "")
                or (request.brand_context or ""),
            ),
            errors=dict(self.errors),
        )

    async def _store_call(self, method: str, *args: object) -> None:
        """Best-effort store write; failures are logged, never raised."""
        if self.store is None:
            return
        try:
            await getattr(self.store, method)(*args)
        except Exception as e:
            logger.warning(
                "Scorecard store write failed",
                extra={"scorecard_id": self._scorecard_id, "operation": method, "error": str(e)},
            )
