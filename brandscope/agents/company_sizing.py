"""Company sizing agent: business-intelligence snippets to a size tier."""

import logging

from pydantic import BaseModel

from brandscope.agents.base_agent import BaseAgent
from brandscope.schemas.brand import SizingResult

logger = logging.getLogger(__name__)


class CompanySizingInput(BaseModel):
    """Input for the company sizing agent."""

    brand_name: str
    brand_context: str | None = None
    industry: str | None = None
    founding_year: str | None = None
    official_domain: str | None = None
    combined_content: str
    max_chars: int = 8000


class CompanySizingAgent(BaseAgent[CompanySizingInput, SizingResult]):
    """Agent that buckets a company into one of five size tiers."""

    model_tier = "standard"
    temperature = 0.2

    @property
    def system_prompt(self) -> str:
        return """You classify company size from third-party business intelligence
(LinkedIn, Glassdoor, Crunchbase, PitchBook, filings, financial press), not from the
company's own marketing.

Size tiers:
- Startup: early stage, <$10M revenue, <100 employees, typically pre-Series A
- Growth: scaling, $10M-$100M revenue, 100-1000 employees, Series A-C
- Mid-Market: established, $100M-$1B revenue, 1000-10000 employees
- Large Enterprise: $1B+ revenue, 10000+ employees
- Unicorn: private, $1B+ valuation, regardless of headcount

Source reliability: Crunchbase, PitchBook, SEC filings and funding announcements are
high; LinkedIn, Glassdoor and industry reports are medium; blogs and estimates are low.

Triangulate, prefer recent data, flag conflicting figures in conflictingInfo, and set
confidence to high, medium or low according to source quality and agreement."""

    @property
    def output_type(self) -> type[SizingResult]:
        return SizingResult

    def _build_prompt(self, input_data: CompanySizingInput) -> str:
        context_lines: list[str] = []
        if input_data.brand_context:
            context_lines.append(f"Company context: {input_data.brand_context}")
        if input_data.industry:
            context_lines.append(f"Industry: {input_data.industry}")
        if input_data.founding_year:
            context_lines.append(f"Founded: {input_data.founding_year}")
        if input_data.official_domain:
            context_lines.append(f"Official domain: {input_data.official_domain}")

        return f"""Determine the size classification for "{input_data.brand_name}".\
{self._format_context_lines(context_lines, "Company Context")}

Business Intelligence Data:
{input_data.combined_content[: input_data.max_chars]}

List the source types you relied on in sources (e.g. "LinkedIn", "Crunchbase", "News")."""
