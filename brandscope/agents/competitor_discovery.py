"""Competitor discovery agent.

Returns free text; the competitor service parses it with a chain of
strategies, so the prompt asks for JSON but nothing here depends on it.
"""

import logging

from pydantic import BaseModel, Field

from brandscope.agents.base_agent import BaseAgent
from brandscope.schemas.search import RedditThread

logger = logging.getLogger(__name__)


class CompetitorDiscoveryInput(BaseModel):
    """Input for the competitor discovery agent."""

    brand_name: str
    brand_context: str | None = None
    threads: list[RedditThread] = Field(default_factory=list)
    max_competitors: int = 4
    max_thread_chars: int = 1000


class CompetitorDiscoveryAgent(BaseAgent[CompetitorDiscoveryInput, str]):
    """Agent that names direct competitors mentioned in Reddit discussions."""

    model_tier = "standard"
    temperature = 0.2

    @property
    def system_prompt(self) -> str:
        return """You identify direct competitors of a brand from Reddit discussions.

Only name companies or products that:
- are explicitly mentioned in the discussions
- offer similar products or services to the target brand
- are presented as alternatives, comparisons or substitutes

Never list the target brand itself, generic product categories, retailers or
marketplaces. Use each competitor's proper brand name."""

    @property
    def output_type(self) -> type[str]:
        return str

    def _build_prompt(self, input_data: CompetitorDiscoveryInput) -> str:
        blocks = []
        for index, thread in enumerate(input_data.threads, start=1):
            blocks.append(
                f"Thread {index}:\n"
                f"Title: {thread.title}\n"
                f"Subreddit: {thread.subreddit}\n"
                f"Content: {thread.content[: input_data.max_thread_chars]}"
            )
        discussions = "\n\n---\n\n".join(blocks)
        context_line = (
            f"\nBrand context: {input_data.brand_context}" if input_data.brand_context else ""
        )

        return f"""Find up to {input_data.max_competitors} direct competitors of "{input_data.brand_name}" \
in these Reddit discussions.{context_line}

{discussions}

Respond with JSON only, in this shape:
{{"competitors": ["Name"], "competitorMentions": {{"Name": 1}}, \
"competitorContexts": {{"Name": ["short quote"]}}, "analysisContext": "one sentence"}}"""
