"""Binary sentiment agent for Reddit discussions of one brand."""

import logging

from pydantic import BaseModel, Field

from brandscope.agents.base_agent import BaseAgent
from brandscope.schemas.search import RedditThread

logger = logging.getLogger(__name__)


class SentimentAnalysisInput(BaseModel):
    """Input for the sentiment analysis agent."""

    brand_name: str
    brand_context: str | None = None
    threads: list[RedditThread] = Field(default_factory=list)
    max_thread_chars: int = 1000


class SentimentAnalysisAgent(BaseAgent[SentimentAnalysisInput, str]):
    """Agent that labels each discussion POSITIVE or NEGATIVE toward a brand.

    The score is recomputed from the labels by the sentiment service, so any
    score the model reports is ignored.
    """

    model_tier = "standard"
    temperature = 0.1

    @property
    def system_prompt(self) -> str:
        return """You analyse sentiment toward a specific brand in Reddit discussions.

For every discussion that mentions the brand, choose exactly one label:
- POSITIVE: praise, recommendation, satisfaction, favourable comparison
- NEGATIVE: complaints, criticism, warnings, unfavourable comparison

There is no neutral label. When a discussion is mixed, pick the label that
dominates. Skip discussions that do not mention the brand at all."""

    @property
    def output_type(self) -> type[str]:
        return str

    def _build_prompt(self, input_data: SentimentAnalysisInput) -> str:
        blocks = []
        for thread in input_data.threads:
            blocks.append(
                f"URL: {thread.url}\n"
                f"Title: {thread.title}\n"
                f"Content: {thread.content[: input_data.max_thread_chars]}"
            )
        discussions = "\n\n---\n\n".join(blocks)
        context_line = (
            f"\nBrand context: {input_data.brand_context}" if input_data.brand_context else ""
        )

        return f"""Classify the sentiment toward "{input_data.brand_name}" in each discussion.{context_line}

{discussions}

Respond with JSON only, in this shape:
{{"sentimentDetails": [{{"url": "...", "title": "...", "sentiment": "POSITIVE", \
"confidence": 0.9, "mentionCount": 1, "excerpt": "short quote"}}], \
"analysisContext": "one sentence summary"}}"""
