"""Brand content extraction agent: verified sources to a BrandProfile."""

import logging

from pydantic import BaseModel

from brandscope.agents.base_agent import BaseAgent
from brandscope.schemas.brand import BrandProfile
from brandscope.schemas.common import AdditionalIdentifiers

logger = logging.getLogger(__name__)


class BrandContentInput(BaseModel):
    """Input for the brand content extraction agent."""

    brand_name: str
    brand_context: str | None = None
    additional_identifiers: AdditionalIdentifiers | None = None
    combined_content: str
    max_chars: int = 6000


class BrandContentExtractionAgent(BaseAgent[BrandContentInput, BrandProfile]):
    """Agent for extracting a structured brand profile from verified sources.

    The output schema enforces 3-7 topics and 1-5 categories; the model is
    retried by pydantic-ai when it violates them.
    """

    model_tier = "reasoning"
    temperature = 0.3

    @property
    def system_prompt(self) -> str:
        return """You are an expert brand analyst. Extract factual brand information from
content that has already been verified as belonging to the brand.

Produce:
1. description: one sentence on what the brand does
2. topics: 3 to 7 topics the brand relates to
3. categories: 1 to 5 business categories or industries
4. additionalContext: founding year, headquarters, global presence and market
   position when the sources state them
5. confidence: high, medium or low for each of the fields above
6. extractionNotes: a short note on source quality

Guidelines:
- Only use information stated in the content or the validation context
- Prefer official brand statements over third-party claims
- Do NOT classify company size; that is handled separately"""

    @property
    def output_type(self) -> type[BrandProfile]:
        return BrandProfile

    def _build_prompt(self, input_data: BrandContentInput) -> str:
        logger.info(
            "Building brand extraction prompt",
            extra={
                "brand": input_data.brand_name,
                "content_length": len(input_data.combined_content),
            },
        )
        content = input_data.combined_content
        if len(content) > input_data.max_chars:
            content = content[: input_data.max_chars] + "\n\n[Content truncated...]"

        context_lines: list[str] = []
        if input_data.brand_context:
            context_lines.append(f"Expected context: {input_data.brand_context}")
        identifiers = input_data.additional_identifiers
        if identifiers:
            if identifiers.industry:
                context_lines.append(f"Expected industry: {identifiers.industry}")
            if identifiers.location:
                context_lines.append(f"Expected location: {identifiers.location}")
            if identifiers.products:
                context_lines.append(
                    f"Expected products/services: {', '.join(identifiers.products)}"
                )

        return f"""Extract structured brand information for "{input_data.brand_name}" \
from the following verified brand content:\
{self._format_context_lines(context_lines, "Validation Context")}

## Content

{content}
"""
